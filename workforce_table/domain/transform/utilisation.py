from __future__ import annotations

import math
import re
import unicodedata
from decimal import Decimal
from enum import Enum

from workforce_table.domain.models import RateField, UtilisationAggregate

DEFAULT_RATE = "0"

_NUMERIC_PREFIX_RE = re.compile(r"[+-]?(?:Infinity|(?:[0-9]+\.?[0-9]*|\.[0-9]+)(?:[eE][+-]?[0-9]+)?)")

# Пробельные символы, которые пропускает parseFloat, помимо категории Zs.
_JS_WHITESPACE = frozenset("\t\n\v\f\r \ufeff\u2028\u2029")


class InvalidRatePolicy(str, Enum):
    """
    Назначение:
        Что делать со ставкой, которая не разбирается в число.

    Значения:
        PASSTHROUGH: NaN доходит до отображения как "NaN%".
        ZERO: NaN заменяется на 0 ("0%").
    """

    PASSTHROUGH = "passthrough"
    ZERO = "zero"


def period_rate(aggregate: UtilisationAggregate | None, rate_field: RateField) -> str:
    """
    Назначение:
        Сырая ставка за период (12 месяцев / с начала года).

    Выходные данные:
        str
            Значение как в источнике, либо "0" при отсутствии агрегата/поля.
    """
    if aggregate is None:
        return DEFAULT_RATE
    value = aggregate.rate_for(rate_field)
    if value is None:
        return DEFAULT_RATE
    return value


def month_rate(aggregate: UtilisationAggregate | None, month_name: str) -> str:
    """
    Назначение:
        Сырая ставка за конкретный месяц.

    Алгоритм:
        - линейный проход по last_three_months_individually;
        - первое точное (регистрозависимое) совпадение month == month_name;
        - "0", если совпадения нет или списка нет.
    """
    if aggregate is None or aggregate.last_three_months_individually is None:
        return DEFAULT_RATE
    for entry in aggregate.last_three_months_individually:
        if entry.month == month_name:
            if entry.utilisation_rate is None:
                return DEFAULT_RATE
            return entry.utilisation_rate
    return DEFAULT_RATE


def parse_rate(raw: str | int | float | None) -> float:
    """
    Назначение:
        Разбор строки ставки с семантикой parseFloat из JavaScript.

    Поведение:
        - ведущие пробелы пропускаются (набор JavaScript, не str.isspace);
        - цифры только ASCII;
        - берётся самый длинный числовой префикс ("42.5abc" -> 42.5);
        - "Infinity"/"-Infinity" разбираются как бесконечность;
        - всё прочее (в т.ч. пустая строка) -> NaN.
    """
    if raw is None:
        return math.nan
    if isinstance(raw, bool):
        return math.nan
    if isinstance(raw, (int, float)):
        return float(raw)
    match = _NUMERIC_PREFIX_RE.match(_strip_js_whitespace(str(raw)))
    if match is None:
        return math.nan
    token = match.group(0)
    if token.endswith("Infinity"):
        return -math.inf if token.startswith("-") else math.inf
    return float(token)


def _strip_js_whitespace(text: str) -> str:
    index = 0
    while index < len(text) and (text[index] in _JS_WHITESPACE or unicodedata.category(text[index]) == "Zs"):
        index += 1
    return text[index:]


def format_number(value: float | int) -> str:
    """
    Назначение:
        Строковое представление числа по правилам JavaScript (Number#toString):
        80.0 -> "80", 42.5 -> "42.5", 1e21 -> "1e+21", 1e-7 -> "1e-7".
    """
    value = float(value)
    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "Infinity" if value > 0 else "-Infinity"
    if value == 0:
        return "0"

    sign = "-" if value < 0 else ""
    digits, point = _shortest_digits(abs(value))
    k = len(digits)

    if k <= point <= 21:
        body = digits + "0" * (point - k)
    elif 0 < point <= 21:
        body = f"{digits[:point]}.{digits[point:]}"
    elif -6 < point <= 0:
        body = "0." + "0" * (-point) + digits
    else:
        exponent = point - 1
        exp_sign = "+" if exponent >= 0 else "-"
        mantissa = digits if k == 1 else f"{digits[0]}.{digits[1:]}"
        body = f"{mantissa}e{exp_sign}{abs(exponent)}"
    return sign + body


def _shortest_digits(value: float) -> tuple[str, int]:
    # repr даёт кратчайшую строку, однозначно восстанавливающую float.
    decimal_tuple = Decimal(repr(value)).as_tuple()
    digits = "".join(str(d) for d in decimal_tuple.digits)
    exponent = decimal_tuple.exponent
    stripped = digits.rstrip("0")
    exponent += len(digits) - len(stripped)
    stripped = stripped.lstrip("0")
    return stripped, len(stripped) + exponent


def format_percent(raw: str, policy: InvalidRatePolicy = InvalidRatePolicy.PASSTHROUGH) -> str:
    value = parse_rate(raw)
    if math.isnan(value) and policy is InvalidRatePolicy.ZERO:
        value = 0.0
    return f"{format_number(value)}%"


def is_numeric_rate(raw: str) -> bool:
    return not math.isnan(parse_rate(raw))
