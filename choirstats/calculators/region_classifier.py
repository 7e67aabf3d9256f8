"""
ChoirStats - Region Classifier

Maps free-text region labels to display colors and to the home/other split.
The color table is read-only; substitute tables can be injected for tests
or for another home region.
"""

import logging
from types import MappingProxyType
from typing import List, Mapping, Optional


logger = logging.getLogger(__name__)


HOME_REGION = "Воронежская область"

# Label used when a concert has no region
UNKNOWN_REGION = "Неизвестно"

UNKNOWN_REGION_COLOR = "#888888"
OTHER_REGION_COLOR = "#34C759"

REGION_COLORS: Mapping[str, str] = MappingProxyType({
    # Central federal district
    "Белгородская область": "#FF6B6B",
    "Брянская область": "#FF8E72",
    "Владимирская область": "#FFA07A",
    "Воронежская область": "#4A90E2",
    "Ивановская область": "#FFB347",
    "Калужская область": "#FFC080",
    "Костромская область": "#FFD700",
    "Курская область": "#FFDA03",
    "Липецкая область": "#FFE4B5",
    "Московская область": "#E6E6FA",
    "Орловская область": "#DDA0DD",
    "Рязанская область": "#DA70D6",
    "Смоленская область": "#BA55D3",
    "Тамбовская область": "#9370DB",
    "Тверская область": "#8A2BE2",
    "Тульская область": "#7B68EE",
    "Ярославская область": "#6A5ACD",
    "Город Москва": "#FFD700",

    # North-western federal district
    "Архангельская область": "#20B2AA",
    "Вологодская область": "#40E0D0",
    "Калининградская область": "#48D1CC",
    "Карелия": "#5F9EA0",
    "Коми": "#66CDAA",
    "Ненецкий автономный округ": "#7FFFD4",
    "Новгородская область": "#00CED1",
    "Псковская область": "#3CB371",
    "Санкт-Петербург": "#FF69B4",
    "Город Санкт-Петербург": "#FF1493",
    "Ямало-Ненецкий автономный округ": "#00FA9A",

    # Volga federal district
    "Республика Башкортостан": "#30B050",
    "Республика Марий Эл": "#00FF00",
    "Республика Мордовия": "#32CD32",
    "Республика Татарстан": "#3CB371",
    "Кировская область": "#2E8B57",
    "Нижегородская область": "#228B22",
    "Оренбургская область": "#006400",
    "Пензенская область": "#556B2F",
    "Самарская область": "#6B8E23",
    "Саратовская область": "#7CB342",
    "Ульяновская область": "#8BC34A",
    "Чувашская Республика": "#9CCC65",
    "Пермский край": "#AED581",
    "Киров": "#CDDC39",

    # Ural federal district
    "Свердловская область": "#FF4500",
    "Тюменская область": "#FF6347",
    "Челябинская область": "#FF7F50",
    "Ханты-Мансийский автономный округ": "#FF8C00",
    "Ямало-Ненецкий АО": "#FFA500",
    "Курганская область": "#FFB6C1",

    # Siberian federal district
    "Республика Алтай": "#1E90FF",
    "Республика Бурятия": "#4169E1",
    "Республика Саха (Якутия)": "#0000CD",
    "Республика Тыва": "#00008B",
    "Республика Хакасия": "#000080",
    "Алтайский край": "#191970",
    "Иркутская область": "#4B0082",
    "Кемеровская область": "#8B008B",
    "Красноярский край": "#8B00FF",
    "Новосибирская область": "#9370DB",
    "Омская область": "#9932CC",
    "Томская область": "#BA55D3",

    # Far Eastern federal district
    "Амурская область": "#DC143C",
    "Еврейская автономная область": "#FF1493",
    "Камчатский край": "#FF69B4",
    "Магаданская область": "#FF00FF",
    "Приморский край": "#FF00FF",
    "Сахалинская область": "#FF00FF",
    "Чукотский автономный округ": "#FF1493",
    "Хабаровский край": "#C71585",
    "Забайкальский край": "#DB7093",
    "Чукотка": "#DDA0DD",

    # Southern federal district
    "Республика Адыгея": "#FFC0CB",
    "Республика Крым": "#FFB6C1",
    "Астраханская область": "#FFC0CB",
    "Волгоградская область": "#FFDAB9",
    "Краснодарский край": "#FFE4E1",
    "Ростовская область": "#FFF0F5",
    "Город Севастополь": "#FF69B4",
    "Севастополь": "#FF1493",

    # North Caucasian federal district
    "Республика Дагестан": "#3D95CE",
    "Республика Ингушетия": "#4A90E3",
    "Кабардино-Балкарская Республика": "#5B9BD5",
    "Карачаево-Черкесская Республика": "#6BA3D9",
    "Республика Северная Осетия": "#7CB0DE",
    "Республика Чечня": "#8DBAE2",
    "Ставропольский край": "#9DC3E6",
    "Ставрополье": "#AECEEB",
})

# Regions offered for selection when a concert is created. Aliases that
# only exist for older records ("Киров", "Ставрополье", ...) are omitted.
ALL_REGIONS: List[str] = [
    region for region in REGION_COLORS
    if region not in {
        "Город Санкт-Петербург", "Киров", "Ямало-Ненецкий АО",
        "Чукотка", "Севастополь", "Ставрополье"
    }
]


class RegionClassifier:
    """
    Classifier for region labels.

    Lookups are exact string matches. Two fallback tiers exist: a missing
    region gets the unknown color, an unrecognized label gets the other color.
    """

    def __init__(
        self,
        colors: Optional[Mapping[str, str]] = None,
        home_region: str = HOME_REGION,
        unknown_color: str = UNKNOWN_REGION_COLOR,
        other_color: str = OTHER_REGION_COLOR
    ):
        """
        Initialize region classifier.

        Args:
            colors: Region to hex color table (default: REGION_COLORS)
            home_region: Label classified as the home region
            unknown_color: Color for concerts without a region
            other_color: Color for labels not in the table
        """
        self.colors: Mapping[str, str] = MappingProxyType(
            dict(REGION_COLORS if colors is None else colors)
        )
        self.home_region = home_region
        self.unknown_color = unknown_color
        self.other_color = other_color
        logger.debug(
            f"RegionClassifier initialized ({len(self.colors)} regions, home: {home_region})"
        )

    def color_for_region(self, region: Optional[str]) -> str:
        """
        Get display color for a region label.

        Args:
            region: Region label (None or empty for unknown)

        Returns:
            Hex color string
        """
        if not region:
            return self.unknown_color
        return self.colors.get(region, self.other_color)

    def is_home_region(self, region: Optional[str]) -> bool:
        """Check whether a label is exactly the home region."""
        return bool(region) and region == self.home_region


DEFAULT_CLASSIFIER = RegionClassifier()


def color_for_region(region: Optional[str]) -> str:
    """Color for a region using the default table."""
    return DEFAULT_CLASSIFIER.color_for_region(region)


def is_home_region(region: Optional[str]) -> bool:
    """Home-region check using the default home region."""
    return DEFAULT_CLASSIFIER.is_home_region(region)


def region_display_name(region: Optional[str]) -> str:
    """Display name for a region label, with a placeholder when missing."""
    return region or "Не указана"


def is_valid_region(region: Optional[str]) -> bool:
    """Check that a region label is set and is not the unknown marker."""
    return bool(region) and region != UNKNOWN_REGION
