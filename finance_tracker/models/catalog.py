"""Category and account catalog entries."""

from pydantic import BaseModel, ConfigDict, Field


class LabelItem(BaseModel):
    """
    A user-editable label with an icon name.

    Categories and accounts share this shape.
    """
    model_config = ConfigDict(str_strip_whitespace=True)

    id: int
    label: str = Field(..., min_length=1, max_length=100)
    icon: str = Field(default="ellipse-outline", max_length=100)


# Catalog defaults used when nothing has been stored yet
DEFAULT_CATEGORIES = [
    LabelItem(id=1, icon="cash-outline", label="Gehälter"),
    LabelItem(id=2, icon="cart-outline", label="Lebensmittel"),
    LabelItem(id=3, icon="car-outline", label="Gas"),
    LabelItem(id=4, icon="home-outline", label="Miete"),
    LabelItem(id=5, icon="barbell-outline", label="Fitnessstudio"),
    LabelItem(id=6, icon="restaurant-outline", label="Restaurant"),
    LabelItem(id=7, icon="airplane-outline", label="Urlaub"),
    LabelItem(id=8, icon="bus-outline", label="Reisen"),
    LabelItem(id=9, icon="gift-outline", label="Geschenk"),
    LabelItem(id=10, icon="trending-up-outline", label="Investitionen"),
    LabelItem(id=11, icon="wallet-outline", label="Ersparnisse"),
    LabelItem(id=12, icon="tv-outline", label="Unterhaltung"),
    LabelItem(id=13, icon="cafe-outline", label="Kaffee"),
    LabelItem(id=14, icon="wifi-outline", label="Internet"),
    LabelItem(id=15, icon="car-outline", label="Taxi"),
]

DEFAULT_ACCOUNTS = [
    LabelItem(id=1, icon="wallet-outline", label="Personal"),
]
