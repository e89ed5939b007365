"""
Dish catalog query layer.

Responsibilities:
- Load the flat dish and user collections from JSON files.
- Paginate and sort the full dish collection.
- Search dishes by name, region, state or flavor profile.
- Match dishes that contain every requested ingredient.
- Filter dishes on diet, origin, course, flavor and time bounds.
"""
