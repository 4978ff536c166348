"""
Unit tests for compatibility modes and apply-time capability probes.
"""

import pytest

from duckkit.capabilities import (
    CompatibilityMode,
    is_optional_read_error,
    optional_read_warning,
    validate_apply_capabilities,
)
from duckkit.errors import APIError, CapabilityError, TransportError
from duckkit.models import Operation, ResourceKind
from duckkit.plan import Action
from tests.fixtures import make_catalog, make_model


def _model_action() -> Action:
    model = make_model()
    return Action(Operation.CREATE, ResourceKind.MODEL, model.path, desired=model)


class TestCompatibilityMode:
    """Tests for parsing the compatibility mode."""

    @pytest.mark.parametrize("value,expected", [
        ("legacy", CompatibilityMode.LEGACY),
        (" LEGACY ", CompatibilityMode.LEGACY),
        ("strict", CompatibilityMode.STRICT),
        ("", CompatibilityMode.STRICT),
        (None, CompatibilityMode.STRICT),
        ("lenient", CompatibilityMode.STRICT),
    ])
    def test_parse(self, value, expected) -> None:
        """Test that anything but legacy means strict."""
        assert CompatibilityMode.parse(value) == expected


class TestOptionalReadErrors:
    """Tests for classifying optional endpoint failures."""

    @pytest.mark.parametrize("status", [404, 405, 501])
    def test_absent_statuses(self, status) -> None:
        """Test that not-found style statuses mean the endpoint is absent in any mode."""
        assert is_optional_read_error(APIError(status, "nope"), CompatibilityMode.STRICT)

    def test_server_error_is_real(self) -> None:
        """Test that a 500 is never excused."""
        assert not is_optional_read_error(APIError(500, "boom"), CompatibilityMode.LEGACY)

    def test_transport_error_only_in_legacy(self) -> None:
        """Test that transport failures are only excused in legacy mode."""
        error = TransportError("GET", "/models", ConnectionResetError("connection reset by peer"))

        assert not is_optional_read_error(error, CompatibilityMode.STRICT)
        assert is_optional_read_error(error, CompatibilityMode.LEGACY)

    def test_warning_text(self) -> None:
        """Test the warning recorded for an absent endpoint."""
        warning = optional_read_warning("macros", APIError(501, "not implemented"))

        assert warning == "macros endpoint unavailable (HTTP 501); continuing without macros state"


class TestApplyCapabilities:
    """Tests for probing gated endpoints before apply."""

    def test_no_probe_without_gated_actions(self, client, fake_server) -> None:
        """Test that plans without model or macro actions never probe."""
        catalog = make_catalog()
        actions = [Action(Operation.CREATE, ResourceKind.CATALOG_REGISTRATION, "lake", desired=catalog)]

        validate_apply_capabilities(client, actions)

        assert fake_server.requests == []

    def test_probe_succeeds(self, client, fake_server) -> None:
        """Test that a reachable endpoint is probed with a single-item page."""
        validate_apply_capabilities(client, [_model_action()])

        call = fake_server.calls("GET", "/models")[0]
        assert call.params == {"max_results": "1"}

    def test_missing_endpoint(self, client, fake_server) -> None:
        """Test that model actions against a server without models are refused."""
        fake_server.error("GET", "/models", 404)

        with pytest.raises(CapabilityError, match="model actions present but /models endpoint is unavailable"):
            validate_apply_capabilities(client, [_model_action()])

    def test_probe_failure(self, client, fake_server) -> None:
        """Test that a probe failing for another reason is also refused."""
        fake_server.error("GET", "/models", 500)

        with pytest.raises(CapabilityError, match="cannot probe /models endpoint"):
            validate_apply_capabilities(client, [_model_action()], CompatibilityMode.STRICT)
