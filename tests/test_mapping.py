"""Unit tests for path mappings."""

from pathlib import Path

import pytest

from springcm_upload.delivery.mapping import (
    Filter,
    PathMapping,
    Task,
    normalize_patterns,
)
from springcm_upload.exceptions import ConfigError
from springcm_upload.models import Credentials


class TestNormalizePatterns:
    """Tests for normalize_patterns()."""

    def test_string_becomes_list(self):
        assert normalize_patterns("*.pdf", "filter.in") == ["*.pdf"]

    def test_list_is_copied(self):
        patterns = ["*.pdf", "*.xml"]
        result = normalize_patterns(patterns, "filter.in")
        assert result == patterns
        assert result is not patterns

    def test_none_allowed(self):
        assert normalize_patterns(None, "filter.out") == []

    def test_none_not_allowed(self):
        with pytest.raises(ConfigError, match="Invalid trigger pattern"):
            normalize_patterns(None, "trigger", allow_missing=False)

    @pytest.mark.parametrize("value", [42, {"a": 1}, True])
    def test_wrong_type(self, value):
        with pytest.raises(ConfigError):
            normalize_patterns(value, "trigger")

    def test_non_string_items(self):
        with pytest.raises(ConfigError, match="must be strings"):
            normalize_patterns(["*.pdf", 3], "filter.in")


class TestFilter:
    """Tests for Filter."""

    def test_from_dict(self):
        f = Filter.from_dict({"in": "*.pdf", "out": ["*.tmp", "*.bak"]})
        assert f.include == ["*.pdf"]
        assert f.exclude == ["*.tmp", "*.bak"]

    def test_missing_filter_delivers_nothing(self):
        f = Filter.from_dict(None)
        assert f.include == []
        assert f.exclude == []

    def test_missing_out(self):
        assert Filter.from_dict({"in": ["*"]}).exclude == []

    def test_invalid_filter(self):
        with pytest.raises(ConfigError, match="Invalid filter"):
            Filter.from_dict(["*.pdf"])


class TestPathMapping:
    """Tests for PathMapping."""

    def test_create_mapping(self):
        mapping = PathMapping(
            remote="/Admin/Inbound",
            local=Path("/data/outbound"),
            trigger=["*.trigger"],
            filter=Filter(include=["*.pdf"]),
        )

        assert mapping.remote == "/Admin/Inbound"
        assert mapping.local == Path("/data/outbound")
        assert mapping.trigger == ["*.trigger"]
        assert mapping.delete is False
        assert mapping.alias is None

    def test_normalization(self):
        mapping = PathMapping(
            remote="Admin/Inbound/",
            local="/data/outbound",
            trigger="*.trigger",
        )

        assert isinstance(mapping.local, Path)
        assert mapping.remote == "/Admin/Inbound"
        assert mapping.trigger == ["*.trigger"]
        assert mapping.filter == Filter()

    def test_frozen(self):
        mapping = PathMapping(remote="/A", local="/data", trigger="*.t")
        with pytest.raises(AttributeError):
            mapping.delete = True  # type: ignore[misc]

    def test_name(self):
        mapping = PathMapping(remote="/A", local="/data", trigger="*.t")
        assert mapping.name == "/data -> /A"
        aliased = PathMapping(remote="/A", local="/data", trigger="*.t", alias="docs")
        assert aliased.name == "docs"

    def test_from_dict(self):
        mapping = PathMapping.from_dict(
            {
                "remote": "/Admin/Inbound",
                "local": "/data/outbound",
                "trigger": ["*.trigger", "*.ready"],
                "filter": {"in": ["*.pdf"], "out": ["*.tmp"]},
                "delete": True,
                "alias": "outbound",
            }
        )

        assert mapping.trigger == ["*.trigger", "*.ready"]
        assert mapping.filter == Filter(include=["*.pdf"], exclude=["*.tmp"])
        assert mapping.delete is True
        assert mapping.alias == "outbound"

    @pytest.mark.parametrize(
        "data, message",
        [
            ({"local": "/data", "trigger": "*"}, "remote"),
            ({"remote": "/A", "trigger": "*"}, "local"),
            ({"remote": "/A", "local": "/data"}, "trigger"),
            ({"remote": "/A", "local": "/data", "trigger": 5}, "trigger"),
            (
                {"remote": "/A", "local": "/data", "trigger": "*", "delete": "yes"},
                "delete",
            ),
        ],
    )
    def test_from_dict_invalid(self, data, message):
        with pytest.raises(ConfigError, match=message):
            PathMapping.from_dict(data)

    def test_from_dict_not_a_dict(self):
        with pytest.raises(ConfigError):
            PathMapping.from_dict("/data")


class TestTask:
    """Tests for Task."""

    def test_display_name(self):
        auth = Credentials(client_id="abc")
        assert Task(auth=auth).display_name == "abc"
        assert Task(auth=auth, name="nightly").display_name == "nightly"

    def test_defaults(self):
        task = Task(auth=Credentials(client_id="abc"))
        assert task.paths == []
        assert task.continue_on_error is False
