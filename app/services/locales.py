"""Per-language wording for fallback copy and prompts.

English and Russian listings share one generator; everything that differs
between them (units, plural rules, price format, sentence templates) lives in
a :class:`CopyLocale` entry below.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple


def plural(count: float, forms: Tuple[str, ...]) -> str:
    """Pick the plural form for ``count``.

    Two forms follow English rules (one / many); three forms follow the
    Russian one / few / many rule. Fractional counts use the "few" form in
    Russian ("1,5 санузла") and the plural in English.
    """

    if len(forms) == 2:
        return forms[0] if count == 1 else forms[1]

    if not float(count).is_integer():
        return forms[1]
    n = abs(int(count))
    if n % 10 == 1 and n % 100 != 11:
        return forms[0]
    if 2 <= n % 10 <= 4 and not 12 <= n % 100 <= 14:
        return forms[1]
    return forms[2]


@dataclass(frozen=True)
class CopyLocale:
    code: str
    language: str
    placeholder_title: str
    decimal_separator: str
    thousands_separator: str
    price_template: str

    title_bedrooms: str
    title_area: str
    title_location: str

    feature_bedrooms: str
    feature_bathrooms: str
    feature_area: str
    feature_default: str

    bedroom_forms: Tuple[str, ...]
    bathroom_forms: Tuple[str, ...]
    rooms_joiner: str

    business_location: str
    business_turnkey: str
    business_floor_plan: str
    business_rooms: str
    business_price: str
    business_move_in: str
    business_photos: str

    emotional_ambiance: str
    emotional_gathering: str
    emotional_neighborhood: str
    emotional_photos: str
    emotional_closing: str

    def format_number(self, value: float) -> str:
        if float(value).is_integer():
            return str(int(value))
        text = f"{value:.2f}".rstrip("0").rstrip(".")
        return text.replace(".", self.decimal_separator)

    def format_price(self, amount: int) -> str:
        grouped = f"{amount:,}".replace(",", self.thousands_separator)
        return self.price_template.format(amount=grouped)

    def count_phrase(self, count: float, forms: Tuple[str, ...]) -> str:
        return f"{self.format_number(count)} {plural(count, forms)}"


EN = CopyLocale(
    code="en",
    language="English",
    placeholder_title="Modern Home",
    decimal_separator=".",
    thousands_separator=",",
    price_template="${amount}",
    title_bedrooms="{n}-Bedroom",
    title_area="{area} ft²",
    title_location=" in {address}",
    feature_bedrooms="{n} BR",
    feature_bathrooms="{n} BA",
    feature_area="{area} ft²",
    feature_default="a balanced layout",
    bedroom_forms=("bedroom", "bedrooms"),
    bathroom_forms=("bathroom", "bathrooms"),
    rooms_joiner=" and ",
    business_location=" at {address}",
    business_turnkey="Turn-key property{location} with {features}.",
    business_floor_plan="Efficient floor plan across {area} square feet with flexible living zones.",
    business_rooms="Comfortable {rooms} for daily convenience.",
    business_price="Priced around {price}.",
    business_move_in=(
        "Ready for immediate move-in and suitable for personal living or as a steady rental asset."
    ),
    business_photos="Photos showcase the space and natural light.",
    emotional_ambiance="Step inside and feel the calm: soft daylight and a welcoming flow set the tone.",
    emotional_gathering=(
        "Cook, gather, and unwind in spaces that bring people together without feeling crowded."
    ),
    emotional_neighborhood="The neighborhood around {address} adds a sense of belonging.",
    emotional_photos="The photos hint at warm evenings and lazy weekends already waiting here.",
    emotional_closing="It's a place that feels like home from the first minute.",
)

RU = CopyLocale(
    code="ru",
    language="Russian",
    placeholder_title="Квартира",
    decimal_separator=",",
    thousands_separator=" ",
    price_template="{amount} ₽",
    title_bedrooms="{n}-комнатная квартира",
    title_area="{area} м²",
    title_location=", {address}",
    feature_bedrooms="{n} комн.",
    feature_bathrooms="{n} с/у",
    feature_area="{area} м²",
    feature_default="сбалансированная планировка",
    bedroom_forms=("спальня", "спальни", "спален"),
    bathroom_forms=("санузел", "санузла", "санузлов"),
    rooms_joiner=" и ",
    business_location=" по адресу {address}",
    business_turnkey="Готовый к заселению объект{location}: {features}.",
    business_floor_plan="Функциональная планировка на {area} м² с гибким зонированием.",
    business_rooms="{rooms} для повседневного комфорта.",
    business_price="Цена около {price}.",
    business_move_in=(
        "Можно заезжать сразу: подходит и для собственного проживания, и как стабильный арендный актив."
    ),
    business_photos="Фотографии показывают пространство и естественный свет.",
    emotional_ambiance="Заходите и почувствуйте спокойствие: мягкий дневной свет и уютная атмосфера задают настроение.",
    emotional_gathering="Готовьте, собирайтесь с близкими и отдыхайте там, где никому не тесно.",
    emotional_neighborhood="Окрестности адреса {address} дарят ощущение своего места.",
    emotional_photos="Фотографии обещают тёплые вечера и неспешные выходные.",
    emotional_closing="Это место, которое с первой минуты ощущается домом.",
)

LOCALES: dict[str, CopyLocale] = {EN.code: EN, RU.code: RU}


def get_locale(code: str | None, default: str = "en") -> CopyLocale:
    """Resolve ``code`` to a locale, falling back to ``default`` and then English."""

    if code and code in LOCALES:
        return LOCALES[code]
    return LOCALES.get(default, EN)
