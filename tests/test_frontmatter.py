import pytest

from cooklang_utils.parsing.frontmatter import (
    FrontmatterEditor,
    parse_yaml_metadata,
    render_frontmatter,
    render_yaml_value,
    split_frontmatter,
)


def test_parse_key_values():
    """Test plain keys, quoted values and comments."""
    metadata = parse_yaml_metadata(
        "# saved by hand\n"
        "title: Pancakes\n"
        'author: "Jane Doe"\n'
        "cuisine: 'French'\n"
        "prep_time: 10:30\n"
    )
    assert metadata == {
        "title": "Pancakes",
        "author": "Jane Doe",
        "cuisine": "French",
        "prep_time": "10:30",
    }


@pytest.mark.parametrize(
    "text, expected",
    [
        ("tags: [breakfast, sweet]", {"tags": "breakfast, sweet"}),
        ("tags: ['a', \"b\"]", {"tags": "a, b"}),
        ("tags: []", {"tags": ""}),
        ("tags:\n  - breakfast\n  - sweet", {"tags": "breakfast, sweet"}),
        (
            "tags:\n  - quick\nservings: 2",
            {"tags": "quick", "servings": "2"},
        ),
        ("notes:", {"notes": ""}),
    ],
)
def test_parse_lists(text, expected):
    """Test that inline arrays and bullet lists flatten to comma-joined text."""
    assert parse_yaml_metadata(text) == expected


@pytest.mark.parametrize(
    "text, expected",
    [
        ("d: |-\n  line1\n  line2", "line1\nline2"),
        ("d: |\n  line1\n  line2\n", "line1\nline2\n"),
        ("d: |+\n  line1\n  line2\n\n", "line1\nline2\n\n"),
        ("d: >-\n  one\n  two", "one two"),
        ("d: >\n  one\n  two\n", "one two\n"),
        ("d: >-\n  p1a\n  p1b\n\n  p2", "p1a p1b\np2"),
        ("d: >-\n  intro\n    indented\n  outro", "intro\n  indented\noutro"),
        ("d: |-\n  p1\n\n  p2", "p1\n\np2"),
    ],
)
def test_block_scalars(text, expected):
    """Test literal and folded block scalars with each chomping indicator."""
    assert parse_yaml_metadata(text) == {"d": expected}


def test_key_after_block_scalar():
    """Test that a less indented line ends the block."""
    metadata = parse_yaml_metadata("description: |-\n  body\ntitle: Soup")
    assert metadata == {"description": "body", "title": "Soup"}


def test_shallower_block_line_warns(mocker):
    """Test that a block cut short by a shallower indented line logs a warning."""
    mock_warning = mocker.patch("cooklang_utils.parsing.frontmatter.logger.warning")
    metadata = parse_yaml_metadata("a: |\n    deep\n  shallow")
    assert metadata == {"a": "deep\n"}
    mock_warning.assert_called_once()
    assert "shallow" in mock_warning.call_args[0][0]


def test_block_ended_by_next_key_does_not_warn(mocker):
    """Test that returning to column zero ends a block quietly."""
    mock_warning = mocker.patch("cooklang_utils.parsing.frontmatter.logger.warning")
    parse_yaml_metadata("description: |-\n  body\ntitle: Soup")
    mock_warning.assert_not_called()


def test_empty_block_scalar():
    """Test a block indicator with no indented lines."""
    assert parse_yaml_metadata("d: |\ntitle: x") == {"d": "", "title": "x"}


@pytest.mark.parametrize(
    "value",
    ["plain", "a\nb", "a\nb\n", "a\nb\n\n", "p1\n\np2"],
)
def test_render_yaml_value_reads_back(value):
    """Test that rendered values parse back to the same text."""
    assert parse_yaml_metadata(render_yaml_value("k", value)) == {"k": value}


@pytest.mark.parametrize(
    "value, expected",
    [
        ("plain", "k: plain"),
        ("a\nb", "k: |-\n  a\n  b"),
        ("a\nb\n", "k: |\n  a\n  b"),
    ],
)
def test_render_yaml_value(value, expected):
    """Test the chomping indicator chosen for multi-line values."""
    assert render_yaml_value("k", value) == expected


def test_render_frontmatter_order():
    """Test that standard fields come first and the rest are sorted."""
    rendered = render_frontmatter(
        {"zeta": "z", "tags": "a, b", "title": "T", "alpha": "x", "images": ""}
    )
    assert rendered == (
        "---\n"
        "title: T\n"
        "tags:\n"
        "  - a\n"
        "  - b\n"
        "images: []\n"
        "alpha: x\n"
        "zeta: z\n"
        "---\n"
    )


def test_split_frontmatter():
    """Test separating metadata from the body."""
    metadata, body = split_frontmatter("---\ntitle: Soup\n---\nBoil @water{1%l}.")
    assert metadata == {"title": "Soup"}
    assert body == "Boil @water{1%l}."


def test_split_without_frontmatter():
    """Test that a document without front matter is all body."""
    assert split_frontmatter("Just a body") == ({}, "Just a body")


def test_editor_set_and_render():
    """Test adding a field and writing the document back out."""
    editor = FrontmatterEditor("---\ntitle: Soup\n---\nBoil @water{1%l}.")
    editor.set("servings", "4")
    assert editor.get("servings") == "4"
    assert editor.updated_content() == (
        "---\ntitle: Soup\nservings: 4\n---\nBoil @water{1%l}."
    )


@pytest.mark.parametrize(
    "key, value",
    [
        ("servings", "many"),
        ("date", "2024-13-01"),
        ("date", "15/01/2024"),
    ],
)
def test_editor_rejects_invalid_values(key, value):
    """Test validation of servings and date."""
    editor = FrontmatterEditor("Body")
    with pytest.raises(ValueError):
        editor.set(key, value)
    assert editor.get(key) is None


def test_editor_accepts_valid_date():
    """Test that an ISO date is stored."""
    editor = FrontmatterEditor("Body")
    editor.set("date", "2024-01-15")
    assert editor.get_all() == {"date": "2024-01-15"}


def test_editor_arrays():
    """Test appending to and removing from array fields."""
    editor = FrontmatterEditor("Body")
    editor.append_to_array("tags", "quick")
    editor.append_to_array("tags", "easy")
    assert editor.get("tags") == "quick, easy"
    editor.remove_from_array("tags", "quick")
    assert editor.get("tags") == "easy"


@pytest.mark.parametrize(
    "method, key, item",
    [
        ("append_to_array", "title", "x"),
        ("remove_from_array", "author", "x"),
        ("remove_from_array", "tags", "missing"),
    ],
)
def test_editor_array_errors(method, key, item):
    """Test that non-array keys and missing items are rejected."""
    editor = FrontmatterEditor("---\ntags: [quick]\n---\nBody")
    with pytest.raises(ValueError):
        getattr(editor, method)(key, item)


def test_editor_delete_everything():
    """Test that removing every field drops the front matter block."""
    editor = FrontmatterEditor("---\ntitle: Soup\n---\nBoil.")
    editor.delete("title")
    editor.delete("not-there")
    assert editor.get("title") is None
    assert editor.updated_content() == "Boil."


def test_get_all_returns_copy():
    """Test that callers cannot change metadata through get_all."""
    editor = FrontmatterEditor("---\ntitle: Soup\n---\n")
    editor.get_all()["title"] = "Stew"
    assert editor.get("title") == "Soup"
