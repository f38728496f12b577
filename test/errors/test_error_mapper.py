"""Tests for error mapper functionality.

These tests verify:
1. Errors are classified into the conditions a run distinguishes
2. Error codes are derived from exception class names
3. Recovery strategies are found by the error's own code, then by class code
4. Error response structure is correct
"""

from kubepair.errors.mapper import (
    RECOVERY_STRATEGIES,
    ErrorKind,
    classify_error,
    create_error_response,
    get_error_code,
    get_recovery_strategy,
)
from kubepair.exceptions import (
    AlreadyExistsError,
    BackendError,
    ConfigurationError,
    DeadlineExceededError,
    FatalRunError,
    KubePairError,
    NotFoundError,
    ValidationError,
)


class TestClassifyError:
    """Tests for error classification."""

    def test_already_exists(self):
        assert classify_error(AlreadyExistsError("Pod", "ns", "p")) is ErrorKind.ALREADY_EXISTS

    def test_not_found(self):
        assert classify_error(NotFoundError("Pod", "ns", "p")) is ErrorKind.NOT_FOUND

    def test_everything_else_is_other(self):
        """Generic backend errors, deadlines and foreign exceptions are all OTHER."""
        for error in (
            BackendError("boom", status=409),
            DeadlineExceededError(1.0, 1),
            RuntimeError("x"),
            ValidationError("C", "m"),
        ):
            assert classify_error(error) is ErrorKind.OTHER

    def test_classification_ignores_status(self):
        """A plain BackendError carrying 404 is not a NotFound condition."""
        assert classify_error(BackendError("gone", status=404)) is ErrorKind.OTHER


class TestGetErrorCode:
    """Tests for error code extraction from exceptions."""

    def test_simple_error_class(self):
        """Test simple error class name conversion."""
        assert get_error_code(ValidationError("TEST", "test message")) == "VALIDATION"

    def test_compound_error_class(self):
        """Test compound error class name conversion."""
        assert get_error_code(DeadlineExceededError(1.0, 1)) == "DEADLINE_EXCEEDED"
        assert get_error_code(AlreadyExistsError("Pod", "ns", "p")) == "ALREADY_EXISTS"

    def test_base_error_class(self):
        """Test base KubePairError class name conversion."""
        assert get_error_code(KubePairError("TEST", "test message")) == "KUBE_PAIR"

    def test_builtin_exception(self):
        assert get_error_code(RuntimeError("x")) == "RUNTIME"
        assert get_error_code(KeyError("x")) == "KEY"


class TestGetRecoveryStrategy:
    """Tests for recovery strategy lookup."""

    def test_class_code_lookup(self):
        error = DeadlineExceededError(1.0, 1)
        strategy = get_recovery_strategy("DEADLINE_EXCEEDED", error)
        assert "--poll-timeout" in strategy

    def test_own_code_lookup(self):
        """A specific code carried by the error takes precedence over the class code."""
        error = ConfigurationError("MISSING_STORAGE_CLASS", "no storage class")
        strategy = get_recovery_strategy("CONFIGURATION", error)
        assert "--storage-class" in strategy

    def test_fallback_for_validation_error(self):
        """Test fallback strategy for unknown ValidationError."""
        error = ValidationError("UNKNOWN_CODE", "Unknown validation error")
        strategy = get_recovery_strategy("UNKNOWN_CODE", error)
        assert strategy == RECOVERY_STRATEGIES["VALIDATION"]

    def test_fallback_for_configuration_error(self):
        error = ConfigurationError("UNKNOWN_CODE", "Unknown")
        strategy = get_recovery_strategy("UNKNOWN_CODE", error)
        assert strategy == RECOVERY_STRATEGIES["CONFIGURATION"]

    def test_generic_fallback(self):
        """Test generic fallback for unknown error type."""
        strategy = get_recovery_strategy("TOTALLY_UNKNOWN", RuntimeError("Some error"))
        assert strategy == "Review the error message and try again."


class TestRecoveryStrategies:
    """Tests for recovery strategies completeness."""

    def test_backend_conditions_have_strategies(self):
        for error in (
            AlreadyExistsError("Pod", "ns", "p"),
            NotFoundError("Pod", "ns", "p"),
            BackendError("x"),
            DeadlineExceededError(1.0, 1),
            FatalRunError(RuntimeError("x"), []),
        ):
            code = get_error_code(error)
            assert code in RECOVERY_STRATEGIES, f"Missing strategy for {code}"

    def test_cli_codes_have_strategies(self):
        for code in ("INVALID_PREFIX", "MISSING_STORAGE_CLASS", "KUBECONFIG_UNUSABLE", "BACKEND_UNAVAILABLE"):
            assert code in RECOVERY_STRATEGIES, f"Missing strategy for {code}"


class TestCreateErrorResponse:
    """Tests for structured error payloads."""

    def test_basic_structure(self):
        error = ValidationError("INVALID_PREFIX", "bad prefix", details={"prefix": "X"})
        response = create_error_response(error)

        assert response["error_code"] == "VALIDATION"
        assert response["code"] == "INVALID_PREFIX"
        assert response["message"] == "bad prefix"
        assert response["details"] == {"prefix": "X"}
        assert "lowercase" in response["recovery_strategy"]

    def test_foreign_exception(self):
        response = create_error_response(ValueError("nope"))
        assert response["error_code"] == "VALUE"
        assert response["message"] == "nope"
        assert response["details"] == {}
        assert "code" not in response

    def test_fatal_run_error_nests_cause(self):
        cause = BackendError("quota exceeded", status=403, reason="Forbidden")
        response = create_error_response(FatalRunError(cause, [cause]))

        assert response["error_code"] == "FATAL_RUN"
        assert response["details"]["fatal_error_count"] == 1
        assert response["cause"]["error_code"] == "BACKEND"
        assert response["cause"]["details"]["status"] == 403
