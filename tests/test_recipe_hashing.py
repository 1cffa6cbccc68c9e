from recipelink.schemas import IngredientIn, StepIn
from recipelink.services.recipe_hashing import hash_recipe


def _recipe():
    ingredients = [
        IngredientIn(reference_id="x1", display="soy sauce", quantity=2, unit="tbsp"),
        IngredientIn(reference_id="x2", display="garlic", note="garlic, minced"),
    ]
    steps = [StepIn(title="Sauce", text="Whisk in the soy sauce."), StepIn(text="Add the garlic.")]
    return ingredients, steps


def test_hash_is_deterministic():
    ingredients, steps = _recipe()
    h = hash_recipe(ingredients, steps)
    assert h == hash_recipe(*_recipe())
    assert len(h) == 64
    int(h, 16)


def test_hash_ignores_ids_and_titles():
    ingredients, steps = _recipe()
    h = hash_recipe(ingredients, steps)

    ingredients[0] = ingredients[0].model_copy(update={"reference_id": "other"})
    steps[0] = steps[0].model_copy(update={"title": "Different title"})
    assert hash_recipe(ingredients, steps) == h


def test_hash_changes_on_content_edit():
    base = hash_recipe(*_recipe())

    for update in ({"quantity": 3}, {"unit": "tsp"}, {"display": "tamari"}):
        ingredients, steps = _recipe()
        ingredients[0] = ingredients[0].model_copy(update=update)
        assert hash_recipe(ingredients, steps) != base, update

    ingredients, steps = _recipe()
    steps[1] = steps[1].model_copy(update={"text": "Add the garlic and stir."})
    assert hash_recipe(ingredients, steps) != base


def test_hash_is_order_sensitive():
    ingredients, steps = _recipe()
    base = hash_recipe(ingredients, steps)
    assert hash_recipe(list(reversed(ingredients)), steps) != base
    assert hash_recipe(ingredients, list(reversed(steps))) != base


def test_empty_recipe_hashes():
    assert hash_recipe([], []) == hash_recipe([], [])
