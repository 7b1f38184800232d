"""Prompts for natural-language recipe search.

Gemini turns a free-text request ("quick healthy dinner for two") into
Spoonacular complexSearch parameters. The prompt lists the allowed values so
the extracted parameters are accepted by the API as-is.
"""

DIETS = (
    "gluten free",
    "ketogenic",
    "vegetarian",
    "lacto-vegetarian",
    "ovo-vegetarian",
    "vegan",
    "pescetarian",
    "paleo",
    "primal",
    "low fodmap",
    "whole30",
)

MEAL_TYPES = (
    "main course",
    "side dish",
    "dessert",
    "appetizer",
    "salad",
    "bread",
    "breakfast",
    "soup",
    "beverage",
    "sauce",
    "marinade",
    "fingerfood",
    "snack",
    "drink",
)

INTOLERANCES = (
    "dairy",
    "egg",
    "gluten",
    "grain",
    "peanut",
    "seafood",
    "sesame",
    "shellfish",
    "soy",
    "sulfite",
    "tree nut",
    "wheat",
)


def get_search_extraction_prompt(query: str) -> str:
    """Build the Gemini prompt that extracts complexSearch parameters from a query.

    Args:
        query: The user's natural-language request, already trimmed.

    Returns:
        str: Prompt asking for a single JSON object.
    """
    return f"""You convert recipe search requests into Spoonacular complexSearch parameters.

Return ONLY one valid JSON object, no markdown, using these optional keys:
- "query": short dish keywords (e.g. "pasta", "chicken curry"). Leave out words covered by other keys.
- "diet": one of {", ".join(DIETS)}
- "cuisine": a cuisine name (e.g. "italian", "thai", "mexican")
- "type": one of {", ".join(MEAL_TYPES)} (use "main course" for lunch or dinner)
- "maxReadyTime": integer minutes ("quick" means 30, "under 20 minutes" means 20)
- "includeIngredients": comma separated ingredients the user wants
- "excludeIngredients": comma separated ingredients the user does not want ("without X")
- "intolerances": comma separated, from: {", ".join(INTOLERANCES)}
- "minCalories", "maxCalories", "minProtein", "maxProtein": integers per serving

Omit keys the request does not mention. Never invent constraints.

Example: "healthy vegan dinner without mushrooms under 30 minutes" ->
{{"query": "dinner", "diet": "vegan", "type": "main course", "excludeIngredients": "mushrooms", "maxReadyTime": 30, "maxCalories": 600}}

Request: {query}"""
