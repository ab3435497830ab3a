"""
Unit tests for shared config, errors and logging helpers.
"""

import pytest

import sys
import os
sys.path.append(os.path.join(os.path.dirname(__file__), '..', '..'))

from shared.config import AnnotatorConfig, DEFAULT_PROVENANCE_KEY, get_config
from shared.errors import ConflictError, NotFoundError, ParseError
from shared.logging import (
    add_reconcile_context, clear_context, object_ref_var, set_reconcile_context
)


class TestConfig:
    """Test cases for AnnotatorConfig."""

    def test_defaults(self, monkeypatch):
        """Test default settings."""
        monkeypatch.delenv("POD_NAMESPACE", raising=False)
        monkeypatch.delenv("ANNOTATOR_SOURCE_NAMESPACE", raising=False)

        config = AnnotatorConfig()

        assert config.source_namespace == "default"
        assert config.source_name == "annotator-rules"
        assert config.policy_key == "rules.yaml"
        assert config.provenance_key == DEFAULT_PROVENANCE_KEY

    def test_environment_overrides(self, monkeypatch):
        """Test settings read from the environment."""
        monkeypatch.setenv("POD_NAMESPACE", "annotator-system")
        monkeypatch.setenv("ANNOTATOR_POLICY_KEY", "policy")
        monkeypatch.setenv("ANNOTATOR_LOG_LEVEL", "debug")

        config = get_config()

        assert config.source_namespace == "annotator-system"
        assert config.policy_key == "policy"
        assert config.log_level == "debug"

    def test_explicit_overrides(self):
        """Test keyword overrides, ignoring None values."""
        config = get_config(source_name="rules", policy_key=None)

        assert config.source_name == "rules"
        assert config.policy_key == "rules.yaml"


class TestErrors:
    """Test cases for canonical errors."""

    def test_to_response(self):
        """Test conversion to the error response model."""
        clear_context()
        error = ConflictError(details={"name": "web"})

        response = error.to_response()

        assert response.code == "CONFLICT_ERROR"
        assert response.details == {"name": "web"}
        assert response.reconcile_id is None

    def test_to_response_carries_reconcile_id(self):
        """Test that the active reconcile id is attached."""
        reconcile_id = set_reconcile_context("target", "default", "web", reconcile_id="abc")
        try:
            assert ParseError().to_response().reconcile_id == reconcile_id
        finally:
            clear_context()

    def test_not_found_message(self):
        """Test the not found error message and details."""
        error = NotFoundError("target", "default", "web")

        assert error.message == "target default/web not found"
        assert error.details == {"kind": "target", "namespace": "default", "name": "web"}


class TestLogging:
    """Test cases for logging context processors."""

    def test_reconcile_context_added(self):
        """Test that correlation fields are added to events."""
        set_reconcile_context("target", "default", "web", reconcile_id="abc")
        try:
            event = add_reconcile_context(None, "info", {"event": "x"})
        finally:
            clear_context()

        assert event == {
            "event": "x",
            "reconcile_id": "abc",
            "object_kind": "target",
            "object_ref": "default/web",
        }
        assert object_ref_var.get() is None
