import pytest

from cooklang_utils.parsing import parser
from cooklang_utils.parsing.lexer import ParseError
from cooklang_utils.parsing.parser import CooklangParser, parse_bytes, parse_string
from cooklang_utils.recipes.models import SOME, Component, ComponentKind


def _components(text, **kwargs):
    recipe = parse_string(text, **kwargs)
    return [component for step in recipe.steps for component in step.components]


def _first(text, kind, **kwargs):
    return next(c for c in _components(text, **kwargs) if c.kind == kind)


def _kinds(step):
    return [component.kind for component in step.components]


def test_simple_ingredient():
    """Test the basic ingredient form."""
    components = _components("Add @flour{500%g}.")
    ingredients = [c for c in components if c.kind == ComponentKind.INGREDIENT]
    assert len(ingredients) == 1
    flour = ingredients[0]
    assert flour.name == "flour"
    assert flour.quantity == "500"
    assert flour.unit == "g"
    assert flour.fixed is False
    assert flour.optional is False


def test_optional_fixed_ingredient():
    """Test @? and a leading = inside the braces."""
    salt = _first("Add @?salt{=1%pinch} to taste.", ComponentKind.INGREDIENT)
    assert salt.name == "salt"
    assert salt.quantity == "1"
    assert salt.unit == "pinch"
    assert salt.optional is True
    assert salt.fixed is True


@pytest.mark.parametrize(
    "text, expected_quantity, expected_unit",
    [
        ("@gin{1/4%fl oz}", "0.25", "fl oz"),
        ("@gin{1 / 2%fl oz}", "0.5", "fl oz"),
        ("@gin{1 1/2%fl oz}", "1.5", "fl oz"),
        ("@gin{2 3/4%fl oz}", "2.75", "fl oz"),
        ("@gin{1 1 / 2%fl oz}", "1.5", "fl oz"),
        ("@gin{2%fl oz}", "2", "fl oz"),
        ("@gin{1.5%fl oz}", "1.5", "fl oz"),
        ("@gin{½%fl oz}", "0.5", "fl oz"),
        ("@gin{1½%fl oz}", "1.5", "fl oz"),
        ("@gin{2¼%fl oz}", "2.25", "fl oz"),
        ("@gin{⅓%fl oz}", "0.3333333333333333", "fl oz"),
        ("@gin{⅔%fl oz}", "0.6666666666666666", "fl oz"),
        ("@gin{01/2%fl oz}", "01/2", "fl oz"),
        ("@gin{1/0%fl oz}", "1/0", "fl oz"),
        ("@salt{}", SOME, ""),
        ("@salt{%pinch}", SOME, "pinch"),
        ("@eggs{3}", "3", ""),
        ("@vanilla{some}", SOME, ""),
        ("@water{ 2 % cups }", "2", "cups"),
    ],
)
def test_quantity_and_unit(text, expected_quantity, expected_unit):
    """Test quantity evaluation and unit reading inside braces."""
    ingredient = _first(text, ComponentKind.INGREDIENT)
    assert ingredient.quantity == expected_quantity
    assert ingredient.unit == expected_unit


def test_multi_word_ingredient():
    """Test that words up to the brace form the name."""
    ingredient = _first("Add @olive oil{2%tbsp} now", ComponentKind.INGREDIENT)
    assert ingredient.name == "olive oil"
    assert ingredient.quantity == "2"


def test_ingredient_without_braces():
    """Test that only the first word is taken when no brace follows."""
    components = _components("Add @salt and pepper.")
    assert [c.kind for c in components] == [
        ComponentKind.TEXT,
        ComponentKind.INGREDIENT,
        ComponentKind.TEXT,
    ]
    assert components[1].name == "salt"
    assert components[1].quantity == SOME
    assert components[2].value == " and pepper."


def test_annotation():
    """Test that (text) right after the braces is an annotation."""
    garlic = _first("Add @garlic{3%cloves}(minced).", ComponentKind.INGREDIENT)
    assert garlic.value == "minced"
    assert garlic.annotation == "minced"


def test_unclosed_annotation_is_text():
    """Test that an unclosed parenthesis is put back as text."""
    components = _components("@garlic{3}(minced")
    assert components[0].value == ""
    assert components[1] == Component(ComponentKind.TEXT, value="(minced")


@pytest.mark.parametrize(
    "text, expected_name, expected_quantity",
    [
        ("Put in #pot{}.", "pot", "1"),
        ("Use #bowls{2}.", "bowls", "2"),
        ("Heat #large skillet{1} over", "large skillet", "1"),
        ("Use #pan for frying", "pan", "1"),
    ],
)
def test_cookware(text, expected_name, expected_quantity):
    """Test cookware names and the default quantity of 1."""
    cookware = _first(text, ComponentKind.COOKWARE)
    assert cookware.name == expected_name
    assert cookware.quantity == expected_quantity


def test_cookware_without_braces_keeps_following_text():
    """Test that words after a brace-less cookware stay in the text."""
    components = _components("Use #pan for frying")
    assert components[-1].value == " for frying"


@pytest.mark.parametrize(
    "text, expected_name, expected_quantity, expected_unit",
    [
        ("Bake ~{25%minutes}.", "", "25", "minutes"),
        ("Let it ~rest{5%min}.", "rest", "5", "min"),
        ("Simmer ~{10-15%minutes}.", "", "10-15", "minutes"),
        ("Wait ~{}.", "", SOME, ""),
        ("Wait ~rest{}.", "rest", SOME, ""),
    ],
)
def test_timers(text, expected_name, expected_quantity, expected_unit):
    """Test named and anonymous timers."""
    timer = _first(text, ComponentKind.TIMER)
    assert timer.name == expected_name
    assert timer.quantity == expected_quantity
    assert timer.unit == expected_unit


def test_timer_name_modes():
    """Test that only extended mode allows multi-word timer names."""
    text = "Let it ~rest well{5%min}."
    assert _first(text, ComponentKind.TIMER).name == "rest"
    assert _first(text, ComponentKind.TIMER, extended=True).name == "rest well"


def test_timer_without_braces_keeps_following_text():
    """Test that tokens after a brace-less timer are not lost."""
    recipe = parse_string("Let it ~rest for a while.")
    assert recipe.steps[0].text == "Let it rest for a while."


@pytest.mark.parametrize(
    "text, expected",
    [
        ("Let it ~rest{}.", "Let it rest."),
        ("Bake ~{25%minutes}.", "Bake 25 minutes."),
        ("Bake ~{25}.", "Bake 25."),
    ],
)
def test_timer_display(text, expected):
    """Test how timers read inside a step, with no amount shown as the name."""
    assert parse_string(text).steps[0].text == expected


@pytest.mark.parametrize(
    "text, expected_steps",
    [
        ("Step one.\n\nStep two.", ["Step one.", "Step two."]),
        ("Step one.\nStill one.", ["Step one. Still one."]),
        ("A.\n\n\n\nB.", ["A.", "B."]),
        ("Step one.\r\n\r\nStep two.\r\n", ["Step one.", "Step two."]),
        ("\n\nOnly step.\n\n", ["Only step."]),
        ("Mix @flour{1%cup}.\n   \nBake it.", ["Mix flour.", "Bake it."]),
        ("Mix.\r\n\t\r\nBake.", ["Mix.", "Bake."]),
        ("Mix.\n  \t  \n\n   \nBake.", ["Mix.", "Bake."]),
        ("Mix.\n   Stir.", ["Mix.   Stir."]),
        ("Mix.\n   ", ["Mix."]),
    ],
)
def test_step_boundaries(text, expected_steps):
    """Test that blank lines split steps and single newlines join lines."""
    recipe = parse_string(text)
    assert [step.text for step in recipe.steps] == expected_steps


def test_text_compression():
    """Test that adjacent text tokens merge into one component."""
    step = parse_string("Add @salt{} and @pepper{} to taste.").steps[0]
    assert _kinds(step) == [
        ComponentKind.TEXT,
        ComponentKind.INGREDIENT,
        ComponentKind.TEXT,
        ComponentKind.INGREDIENT,
        ComponentKind.TEXT,
    ]
    assert step.components[0].value == "Add "
    assert step.components[2].value == " and "
    assert step.components[4].value == " to taste."


def test_sections_start_new_steps():
    """Test that section headers end the current step."""
    recipe = parse_string("= Dough\nMix @flour{}\n\n== Filling ==\nAdd @jam{}")
    assert len(recipe.steps) == 2
    assert recipe.steps[0].components[0] == Component(ComponentKind.SECTION, name="Dough")
    assert recipe.steps[0].components[1].value == "Mix "
    assert recipe.steps[1].components[0].name == "Filling"


def test_section_interrupts_step():
    """Test that a section header right after prose flushes it."""
    recipe = parse_string("Mix well.\n= Baking\nBake.")
    assert recipe.steps[0].text == "Mix well."
    assert recipe.steps[1].components[0].kind == ComponentKind.SECTION


def test_notes_are_their_own_step():
    """Test that a note never shares a step with prose."""
    recipe = parse_string("> Preheat the oven.\n> Really.\nMix @flour{}")
    assert len(recipe.steps) == 2
    assert recipe.steps[0].components == [
        Component(ComponentKind.NOTE, value="Preheat the oven. Really.")
    ]
    assert _kinds(recipe.steps[1]) == [ComponentKind.TEXT, ComponentKind.INGREDIENT]


@pytest.mark.parametrize(
    "text, expected_steps",
    [
        ("-- header comment\nCook @pasta{}.", ["Cook pasta."]),
        ("Mix well -- or not\nThen rest.", ["Mix well Then rest."]),
        ("Boil.\n-- comment\nServe.", ["Boil. Serve."]),
        ("Boil.\n-- comment\n\nServe.", ["Boil.", "Serve."]),
    ],
)
def test_comments_dropped_in_canonical_mode(text, expected_steps):
    """Test that comments vanish without splitting or joining steps wrongly."""
    recipe = parse_string(text)
    assert [step.text for step in recipe.steps] == expected_steps


def test_comments_kept_in_extended_mode():
    """Test that extended mode keeps comments as components."""
    recipe = parse_string("Boil.\n-- check salt\nServe.", extended=True)
    assert len(recipe.steps) == 2
    assert recipe.steps[0].text == "Boil."
    assert recipe.steps[1].components[0] == Component(
        ComponentKind.COMMENT, value="check salt"
    )
    assert recipe.steps[1].components[1].value == "Serve."


def test_block_comments():
    """Test block comments in both modes."""
    canonical = parse_string("Add [- secret -] salt.")
    assert len(canonical.steps) == 1
    assert all(c.kind == ComponentKind.TEXT for c in canonical.steps[0].components)

    extended = _components("Add [- secret -] salt.", extended=True)
    assert Component(ComponentKind.BLOCK_COMMENT, value="secret") in extended


def test_sigil_without_name_is_text():
    """Test that a lone @ stays in the prose."""
    recipe = parse_string("Sold @ 5 per kilo.")
    assert recipe.steps[0].components == [
        Component(ComponentKind.TEXT, value="Sold @ 5 per kilo.")
    ]


def test_frontmatter_metadata():
    """Test that front matter fills the metadata."""
    recipe = parse_string(
        "---\ntitle: Test Recipe\nservings: 4\ntags: [pasta, quick]\n---\n"
        "Cook @pasta{500%g}."
    )
    assert recipe.metadata["title"] == "Test Recipe"
    assert recipe.servings == 4.0
    assert recipe.tags == ["pasta", "quick"]
    assert len(recipe.steps) == 1
    assert recipe.steps[0].text == "Cook pasta."


def test_frontmatter_block_scalar():
    """Test a strip-chomped literal block in front matter."""
    recipe = parse_string("---\ndescription: |-\n  line1\n  line2\n---\n")
    assert recipe.metadata["description"] == "line1\nline2"
    assert recipe.steps == []


def test_frontmatter_with_crlf():
    """Test front matter in a CRLF document."""
    recipe = parse_string("---\r\ntitle: Test\r\n---\r\n\r\nCook the @pasta{}")
    assert recipe.title == "Test"
    assert len(recipe.steps) == 1


def test_legacy_metadata_lines():
    """Test >> key: value lines."""
    recipe = parse_string(">> title: Old Style\n>> servings: 2\nCook @rice{1%cup}.")
    assert recipe.metadata == {"title": "Old Style", "servings": "2"}
    assert recipe.steps[0].text == "Cook rice."


@pytest.mark.parametrize(
    "text",
    [
        "Add @flour{500%g",
        "Bake ~{25%min",
        "---\ntitle: x\n",
    ],
)
def test_structural_errors(text):
    """Test that structural problems abort the parse."""
    with pytest.raises(ParseError):
        parse_string(text)


def test_parse_bytes():
    """Test parsing UTF-8 bytes, with and without a byte order mark."""
    recipe = parse_bytes("Add @crème fraîche{2%tbsp}.".encode("utf-8"))
    assert recipe.get_ingredients()[0].name == "crème fraîche"
    assert parse_bytes(b"\xef\xbb\xbfAdd @salt{}.").steps[0].text == "Add salt."


def test_parse_bytes_invalid_utf8():
    """Test that undecodable input is a parse error."""
    with pytest.raises(ParseError, match="UTF-8"):
        parse_bytes(b"Add @salt{\xff}")


def test_parser_instance_is_reusable():
    """Test that one parser can parse several documents independently."""
    parser = CooklangParser()
    first = parser.parse("Add @salt{}.")
    second = parser.parse("Add @pepper{}.\n\nServe.")
    assert len(first.steps) == 1
    assert len(second.steps) == 2


def test_parse_logs_summary(mocker):
    """Test that each parse reports a one-line summary."""
    mock_info = mocker.patch.object(parser.logger, "info")
    parse_string("---\ntitle: Soup\n---\nBoil.\n\nServe.")
    mock_info.assert_called_once()
    assert "Soup" in mock_info.call_args[0][0]
