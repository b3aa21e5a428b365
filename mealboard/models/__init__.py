from mealboard.models.restaurant import Restaurant, RestaurantType
from mealboard.models.week import Week
from mealboard.models.meal import Meal, MealType
from mealboard.models.menu_item import MenuItem

__all__ = [
    "Restaurant",
    "RestaurantType",
    "Week",
    "Meal",
    "MealType",
    "MenuItem",
]
