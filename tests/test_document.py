"""Unit tests for document tree models."""

import dataclasses

import pytest

from jira_bridge.document import (
    ADF_VERSION,
    BulletList,
    CodeBlock,
    Document,
    Heading,
    ListItem,
    MarkedText,
    MarkType,
    Paragraph,
    PlainText,
)


class TestMarkType:
    """MarkType values are the ADF mark names."""

    def test_values(self):
        assert MarkType.STRONG.value == "strong"
        assert MarkType.EMPHASIS.value == "em"
        assert MarkType.CODE.value == "code"

    def test_str_enum_compares_to_string(self):
        """(str, Enum) members compare equal to their value."""
        assert MarkType.STRONG == "strong"


class TestHeading:
    """Heading level validation."""

    @pytest.mark.parametrize("level", [1, 2, 3, 4, 5, 6])
    def test_valid_levels(self, level):
        assert Heading(level).level == level

    @pytest.mark.parametrize("level", [0, 7, -1])
    def test_invalid_levels(self, level):
        with pytest.raises(ValueError, match="Heading level"):
            Heading(level)


class TestImmutability:
    """Nodes are frozen value objects."""

    def test_document_is_frozen(self):
        document = Document()
        with pytest.raises(dataclasses.FrozenInstanceError):
            document.blocks = ()

    def test_run_is_frozen(self):
        run = PlainText("x")
        with pytest.raises(dataclasses.FrozenInstanceError):
            run.text = "y"

    def test_structural_equality(self):
        """Equal content means equal nodes."""
        a = BulletList((ListItem(Paragraph((MarkedText("x", MarkType.CODE),))),))
        b = BulletList((ListItem(Paragraph((MarkedText("x", MarkType.CODE),))),))
        assert a == b
        assert hash(a) == hash(b)

    def test_different_marks_not_equal(self):
        assert MarkedText("x", MarkType.CODE) != MarkedText("x", MarkType.STRONG)


class TestDocument:
    """Document defaults."""

    def test_defaults(self):
        document = Document()
        assert document.blocks == ()
        assert document.version == ADF_VERSION == 1

    def test_version_not_overridable(self):
        """The ADF version is fixed, not a constructor argument."""
        with pytest.raises(TypeError):
            Document(version=2)

    def test_code_block_language_optional(self):
        assert CodeBlock(language=None, text="").language is None
