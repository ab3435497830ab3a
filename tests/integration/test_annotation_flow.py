"""
Integration tests for the annotation reconciliation flow.
"""

import json

import pytest

import sys
import os
sys.path.append(os.path.join(os.path.dirname(__file__), '..', '..'))

from service_annotator.app.main import AnnotatorService, EventKind, ReconcileEvent
from service_annotator.app.repository import InMemoryObjectRepository, SourceObject, TargetObject
from shared.config import DEFAULT_PROVENANCE_KEY
from shared.errors import ValidationError
from shared.test_helpers import AnnotatorDataFactory, POLICY_KEY, SOURCE_NAME, SOURCE_NAMESPACE

MARKER = DEFAULT_PROVENANCE_KEY


class TestAnnotationFlow:
    """Integration tests for policy changes flowing to targets."""

    @pytest.fixture
    def repository(self):
        """Create repository with an initial policy and targets."""
        repository = InMemoryObjectRepository()
        repository.put_source(SourceObject(SOURCE_NAMESPACE, SOURCE_NAME, {POLICY_KEY: (
            "timeouts:\n"
            "  namespace: prod*\n"
            "  annotations:\n"
            "    proxy-read-timeout: '300'\n"
            "    team: infra\n"
            "web:\n"
            "  namespace: '!dev*,prod*'\n"
            "  name: web\n"
            "  annotations:\n"
            "    team: web\n"
        )}))
        repository.put_target(TargetObject("prod-eu", "web", {"owner": "alice"}))
        repository.put_target(TargetObject("prod-eu", "api"))
        repository.put_target(TargetObject("dev-1", "web"))
        return repository

    @pytest.fixture
    def service(self, repository):
        """Create service and converge all targets."""
        service = AnnotatorService(repository, AnnotatorDataFactory.create_test_config())
        service.resync()
        return service

    def _send_policy(self, service, repository, text):
        repository.put_source(SourceObject(SOURCE_NAMESPACE, SOURCE_NAME, {POLICY_KEY: text}))
        return service.handle_event(ReconcileEvent(EventKind.SOURCE, SOURCE_NAMESPACE, SOURCE_NAME))

    def test_initial_convergence(self, service, repository):
        """Test the state after the first resync."""
        web = repository.get_target("prod-eu", "web").annotations
        assert web == {
            "owner": "alice",
            "proxy-read-timeout": "300",
            "team": "web",
            MARKER: '{"proxy-read-timeout":"300","team":"web"}',
        }
        assert repository.get_target("prod-eu", "api").annotations["team"] == "infra"
        assert repository.get_target("dev-1", "web").annotations == {}

    def test_resync_is_idempotent(self, service, repository):
        """Test that a second resync writes nothing."""
        versions = {t.key: t.resource_version for t in repository.list_targets()}

        results = service.resync()

        assert not any(r.updated for r in results)
        assert {t.key: t.resource_version for t in repository.list_targets()} == versions

    def test_external_takeover_survives_policy_removal(self, service, repository):
        """Test that a key changed by someone else is never removed."""
        api = repository.get_target("prod-eu", "api")
        annotations = dict(api.annotations)
        annotations["team"] = "payments"
        repository.update_target(api.with_annotations(annotations))

        self._send_policy(service, repository, "")

        api_annotations = repository.get_target("prod-eu", "api").annotations
        assert api_annotations == {"team": "payments", MARKER: "{}"}
        assert repository.get_target("prod-eu", "web").annotations == {"owner": "alice", MARKER: "{}"}

    def test_rejected_policy_then_fix(self, service, repository):
        """Test that a bad policy changes nothing and a fixed one rolls out."""
        with pytest.raises(ValidationError):
            self._send_policy(service, repository, "web:\n  namespace: Prod\n")
        assert repository.get_target("prod-eu", "web").annotations["team"] == "web"

        self._send_policy(service, repository, "web:\n  namespace: prod-eu\n  name: web\n  annotations:\n    team: edge\n")

        web = repository.get_target("prod-eu", "web").annotations
        assert web["team"] == "edge"
        assert "proxy-read-timeout" not in web
        assert json.loads(web[MARKER]) == {"team": "edge"}
        api = repository.get_target("prod-eu", "api").annotations
        assert api == {MARKER: "{}"}

    def test_new_target_observed(self, service, repository):
        """Test that a newly observed target is converged on its event."""
        repository.put_target(TargetObject("prod-us", "web", {"owner": "bob"}))

        service.handle_event(ReconcileEvent(EventKind.TARGET, "prod-us", "web"))

        annotations = repository.get_target("prod-us", "web").annotations
        assert annotations["team"] == "web"
        assert annotations["owner"] == "bob"
