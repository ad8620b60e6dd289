"""Structure contract tests for the SOP documents feature."""
from __future__ import annotations

from pathlib import Path


def test_structure_contract() -> None:
    """Fail if required scaffold files are missing."""
    root = Path(__file__).resolve().parents[1]
    required = [
        root / "enum" / "document_status.py",
        root / "enum" / "document_action.py",
        root / "enum" / "user_role.py",
        root / "enum" / "log_action.py",
        root / "dto" / "controls_state.py",
        root / "dto" / "effects.py",
        root / "dto" / "transition.py",
        root / "models" / "document_models.py",
        root / "logic" / "pending_with.py",
        root / "logic" / "eligibility.py",
        root / "logic" / "workflow_engine.py",
        root / "logic" / "revision_dates.py",
        root / "logic" / "code_generator.py",
        root / "services" / "policy" / "notification_policy.py",
        root / "services" / "workflow_service.py",
        root / "services" / "document_creation_service.py",
        root / "services" / "audit_service.py",
        root / "services" / "notification_service.py",
        root / "repository" / "document_store.py",
        root / "repository" / "sqlite_document_store.py",
        root / "config" / "workflow_notifications.json",
        root / "exceptions" / "errors.py",
        root / "tests" / "test_structure_contract.py",
        root / "tests" / "test_workflow_engine.py",
        root / "tests" / "test_eligibility.py",
    ]
    missing = [path for path in required if not path.exists()]
    assert not missing, f"Missing required files: {missing}"
