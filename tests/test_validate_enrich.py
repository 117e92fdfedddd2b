"""Tests for spec validation and enrichment."""

import pytest

from vbump.constants import Constants
from vbump.versioning.enrich import enrich_spec, enrich_spec_1, source_kind_of
from vbump.versioning.errors import SpecValidationError
from vbump.versioning.models import SourceKind
from vbump.versioning.validate import normalize_spec, validation_error


class TestValidationError:
    """Tests for per-type required fields."""

    @pytest.mark.parametrize("spec", [
        {"type": "rpm", "name": "a", "repo": "R"},
        {"type": "image", "image": "x"},
        {"type": "image", "image": "x", "artifactory-api": "https://a/api", "registry": "r"},
        {"type": "npm", "name": "yaml"},
        {"type": "literal", "version-literal": "1"},
        {"type": "git", "paths": ["src"]},
    ])
    def test_valid_specs(self, spec):
        assert validation_error("V", spec) is None

    def test_rpm_missing_fields_listed_together(self):
        assert validation_error("V", {"type": "rpm"}) == "V: missing name, missing repo"

    def test_missing_type(self):
        assert validation_error("V", {"name": "a"}) == "V: missing type"

    def test_artifactory_image_needs_registry(self):
        msg = validation_error("V", {"type": "image", "image": "x", "artifactory-api": "https://a"})
        assert msg == "V: missing registry"

    def test_unknown_type(self):
        assert "unknown type" in validation_error("V", {"type": "deb"})

    def test_every_supported_type_has_required_fields(self):
        for vtype in Constants.SUPPORTED_TYPES:
            assert "unknown type" not in (validation_error("V", {"type": vtype}) or "")


class TestNormalizeSpec:
    """Tests for defaults merge plus validation."""

    def test_collects_all_errors(self):
        with pytest.raises(SpecValidationError) as exc:
            normalize_spec([], {"A": {"type": "rpm"}, "B": {"type": "npm"}, "C": {"type": "literal", "version-literal": "1"}})
        assert exc.value.errors == ["A: missing name, missing repo", "B: missing name"]
        assert str(exc.value).startswith("Invalid specs found:\n")

    def test_defaults_satisfy_requirements(self):
        defaults = [{"by-type": {"rpm": {"repo": "R"}}}]
        full = normalize_spec(defaults, {"A": {"type": "rpm", "name": "a"}})
        assert full["A"]["repo"] == "R"

    def test_unchecked_returns_invalid_spec(self):
        full = normalize_spec([], {"A": {"type": "rpm"}}, checked=False)
        assert full["A"]["type"] == "rpm"

    def test_by_name_only_entries_not_validated(self):
        defaults = [{"by-name": {"GHOST": {"type": "rpm"}}}]
        full = normalize_spec(defaults, {"A": {"type": "literal", "version-literal": "1"}})
        assert list(full) == ["A"]


class TestEnrichSpec:
    """Tests for derived source kind and repository identifiers."""

    def test_simple_kinds(self):
        assert enrich_spec_1("A", {"type": "rpm"})["source-kind"] == "rpm"
        assert enrich_spec_1("A", {"type": "npm"})["source-kind"] == "npm"
        assert enrich_spec_1("A", {"type": "git"})["source-kind"] == "voom"
        assert enrich_spec_1("A", {"type": "literal"})["source-kind"] == "literal"

    def test_docker_hub_default_namespace(self):
        spec = enrich_spec_1("A", {"type": "image", "image": "ubuntu"})
        assert spec["source-kind"] == "docker-hub"
        assert spec["full-image"] == "library/ubuntu"
        assert spec["var-name"] == "A"

    def test_docker_hub_custom_namespace(self):
        spec = enrich_spec_1("A", {"type": "image", "image": "svc", "namespace": "team"})
        assert spec["full-image"] == "team/svc"

    def test_artifactory(self):
        spec = enrich_spec_1("A", {
            "type": "image", "image": "svc", "namespace": "proj",
            "registry": "docker-local", "artifactory-api": "https://art/api",
        })
        assert spec["source-kind"] == "docker-artifactory"
        assert spec["full-image"] == "proj/svc"

    def test_ecr_registry(self):
        spec = enrich_spec_1("A", {
            "type": "image", "image": "svc",
            "registry": "123456789012.dkr.ecr.us-east-1.amazonaws.com",
        })
        assert spec["source-kind"] == "docker-ecr"
        assert spec["ecr-region"] == "us-east-1"
        assert spec["ecr-account"] == "123456789012"
        assert spec["full-image"] == "svc"
        assert source_kind_of(spec) is SourceKind.DOCKER_ECR

    def test_artifactory_wins_over_ecr_hostname(self):
        spec = enrich_spec_1("A", {
            "type": "image", "image": "svc", "artifactory-api": "https://art/api",
            "registry": "123456789012.dkr.ecr.us-east-1.amazonaws.com",
        })
        assert spec["source-kind"] == "docker-artifactory"

    def test_idempotent(self):
        raw = {"A": {"type": "image", "image": "svc", "registry": "1.dkr.ecr.eu-west-1.amazonaws.com"},
               "B": {"type": "image", "image": "ubuntu"}}
        once = enrich_spec(raw)
        assert enrich_spec(once) == once

    def test_does_not_mutate_input(self):
        raw = {"type": "image", "image": "ubuntu"}
        enrich_spec_1("A", raw)
        assert raw == {"type": "image", "image": "ubuntu"}
