from recipelink.schemas import Association, IngredientIn, with_reference_ids
from recipelink.services.ingredient_mapping import (
    build_ingredient_step_mapping,
    get_ingredients_for_step,
    get_steps_for_ingredient,
)


def _ingredients():
    return with_reference_ids([
        IngredientIn(display="soy sauce", quantity=2, unit="tbsp"),
        IngredientIn(reference_id="garlic-ref", display="garlic, minced"),
        IngredientIn(display="scallions"),
    ])


def _associations():
    return [
        Association(ingredient="soy sauce", step=1, text="the soy sauce"),
        Association(ingredient="garlic", step=1, text="garlic"),
        Association(ingredient="garlic", step=3, text="the garlic"),
        Association(ingredient="more scallions", step=3, text="more scallions"),
        Association(ingredient="msg", step=2, text="msg"),
    ]


def test_reference_ids_are_synthesized_by_position():
    assert [i.reference_id for i in _ingredients()] == ["ingredient-0", "garlic-ref", "ingredient-2"]


def test_mapping_both_directions():
    mapping = build_ingredient_step_mapping(_ingredients(), _associations())

    assert get_ingredients_for_step(1, mapping) == ["garlic-ref", "ingredient-0"]
    assert get_ingredients_for_step(3, mapping) == ["garlic-ref", "ingredient-2"]
    assert get_steps_for_ingredient("garlic-ref", mapping) == [1, 3]
    assert get_steps_for_ingredient("ingredient-0", mapping) == [1]


def test_unresolved_association_is_excluded():
    mapping = build_ingredient_step_mapping(_ingredients(), _associations())

    # "msg" matched nothing: step 2 has no ingredients and no id maps to step 2
    assert get_ingredients_for_step(2, mapping) == []
    assert all(2 not in steps for steps in mapping.ingredient_to_steps.values())


def test_mapping_is_symmetric():
    mapping = build_ingredient_step_mapping(_ingredients(), _associations())

    for step, ids in mapping.step_to_ingredients.items():
        for ref in ids:
            assert step in mapping.ingredient_to_steps[ref]
    for ref, steps in mapping.ingredient_to_steps.items():
        for step in steps:
            assert ref in mapping.step_to_ingredients[step]


def test_unknown_lookups_are_empty():
    mapping = build_ingredient_step_mapping([], [])
    assert get_ingredients_for_step(1, mapping) == []
    assert get_steps_for_ingredient("nope", mapping) == []


def test_to_schema_lists():
    out = build_ingredient_step_mapping(_ingredients(), _associations()).to_schema()
    assert out.step_to_ingredients == {1: ["garlic-ref", "ingredient-0"], 3: ["garlic-ref", "ingredient-2"]}
    assert out.ingredient_to_steps == {"garlic-ref": [1, 3], "ingredient-0": [1], "ingredient-2": [3]}
