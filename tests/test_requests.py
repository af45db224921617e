"""Tests for service request models."""

import ast
from pathlib import Path

import pytest
from pydantic import ValidationError as PydanticValidationError

from discipline_engine.api import schemas
from discipline_engine.services import requests

SERVICES_DIR = Path(requests.__file__).parent


class TestRequestModels:
    """Service inputs live with the services; the API reuses them."""

    @pytest.mark.parametrize(
        "name",
        ["CreateActionRequest", "EditActionRequest", "SignatureRequest", "VoidActionRequest"],
    )
    def test_api_reuses_service_models(self, name):
        assert getattr(schemas, name) is getattr(requests, name)

    @pytest.mark.parametrize("path", sorted(SERVICES_DIR.glob("*.py")), ids=lambda p: p.name)
    def test_services_do_not_import_api(self, path):
        tree = ast.parse(path.read_text())
        imported = [
            node.module
            for node in ast.walk(tree)
            if isinstance(node, ast.ImportFrom) and node.module
        ] + [
            alias.name
            for node in ast.walk(tree)
            if isinstance(node, ast.Import)
            for alias in node.names
        ]

        assert not [m for m in imported if m.startswith("discipline_engine.api")]

    def test_edit_patch_contains_only_set_fields(self):
        patch = requests.EditActionRequest(points_adjusted=2, adjustment_reason="late")
        assert patch.to_patch() == {"points_adjusted": 2, "adjustment_reason": "late"}

    def test_unknown_fields_rejected(self):
        with pytest.raises(PydanticValidationError):
            requests.VoidActionRequest(reason="dup", voided_by="someone")
