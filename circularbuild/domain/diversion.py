# circularbuild/domain/diversion.py
"""Landfill-diversion maths.

Everything here is pure: listings go in (ORM rows, schemas or anything
exposing ``materials``, ``material_type``, ``approximate_weight_lbs`` and
``count``), weights in pounds and CO2-equivalent in kilograms come out.
"""
import math
from collections.abc import Iterable
from typing import Any

from circularbuild.domain.entities import DiversionMetrics, MaterialEntry, MaterialSummary

MATERIAL_OPTIONS = [
    "Wood (dimensional lumber)",
    "Steel (structural, generic carbon)",
    "Aluminum (wrought/ingot)",
    "Glass (soda-lime)",
    "Plastic PET (#1)",
    "Plastic PVC (#3)",
    "Drywall (gypsum board)",
    "Concrete (ready-mix, 4000 psi)",
    "Masonry (CMU)",
    "Other",
]

# kg CO2e per pound of material
EMISSIONS_PER_POUND_KG: dict[str, float] = {
    "Wood (dimensional lumber)": 0.595,
    "Steel (structural, generic carbon)": 0.845,
    "Aluminum (wrought/ingot)": 3.75,
    "Glass (soda-lime)": 0.275,
    "Plastic PET (#1)": 1.09,
    "Plastic PVC (#3)": 0.975,
    "Drywall (gypsum board)": 0.08,
    "Concrete (ready-mix, 4000 psi)": 0.0682,
    "Masonry (CMU)": 0.0613,
}

LEGACY_ALIASES: dict[str, str] = {
    "Wood": "Wood (dimensional lumber)",
    "Steel": "Steel (structural, generic carbon)",
    "Aluminum": "Aluminum (wrought/ingot)",
    "Glass": "Glass (soda-lime)",
    "Plastic": "Plastic PET (#1)",
    "Drywall": "Drywall (gypsum board)",
    "Concrete": "Concrete (ready-mix, 4000 psi)",
    "Masonry": "Masonry (CMU)",
}


def _positive_number(value: Any) -> float:
    try:
        number = float(value)
    except (TypeError, ValueError):
        return 0.0
    if not math.isfinite(number) or number <= 0:
        return 0.0
    return number


def normalize_material_label(label: str | None) -> str | None:
    if not label:
        return None
    trimmed = label.strip()
    if not trimmed:
        return None
    return LEGACY_ALIASES.get(trimmed, trimmed)


def calculate_co2e_kg(material_label: str | None, weight_lbs: Any) -> float:
    weight = _positive_number(weight_lbs)
    if weight <= 0:
        return 0.0
    normalized = normalize_material_label(material_label)
    if not normalized:
        return 0.0
    factor = EMISSIONS_PER_POUND_KG.get(normalized, 0.0)
    return round(weight * factor, 2)


def normalize_materials(entries: Iterable[Any] | None) -> list[MaterialEntry]:
    """Clean a raw materials breakdown.

    Entries may be dicts (``type``/``material`` and ``weight_lbs``/``weightLbs``)
    or objects with ``type`` and ``weight_lbs`` attributes. Entries without a
    label or a positive weight are dropped.
    """
    normalized: list[MaterialEntry] = []
    for entry in entries or []:
        if isinstance(entry, dict):
            label = entry.get("type") or entry.get("material")
            weight = entry.get("weight_lbs", entry.get("weightLbs"))
        else:
            label = getattr(entry, "type", None)
            weight = getattr(entry, "weight_lbs", None)
        material = normalize_material_label(label if isinstance(label, str) else None)
        weight_lbs = _positive_number(weight)
        if not material or weight_lbs <= 0:
            continue
        normalized.append(
            MaterialEntry(
                type=material,
                weight_lbs=round(weight_lbs, 2),
                co2e_kg=calculate_co2e_kg(material, weight_lbs),
            )
        )
    return normalized


def listing_weight(listing: Any) -> float:
    weight = _positive_number(getattr(listing, "approximate_weight_lbs", None))
    if weight > 0:
        return weight
    return _positive_number(getattr(listing, "count", None))


def compute_material_summary(listing: Any) -> MaterialSummary:
    materials = getattr(listing, "materials", None) or []
    if materials:
        total_weight = 0.0
        total_co2e = 0.0
        for entry in materials:
            if isinstance(entry, dict):
                label = entry.get("type")
                weight = _positive_number(entry.get("weight_lbs"))
                co2e = entry.get("co2e_kg")
            else:
                label = getattr(entry, "type", None)
                weight = _positive_number(getattr(entry, "weight_lbs", None))
                co2e = getattr(entry, "co2e_kg", None)
            if weight <= 0:
                continue
            total_weight += weight
            if co2e is None:
                total_co2e += calculate_co2e_kg(label, weight)
            else:
                total_co2e += _positive_number(co2e)
        if total_weight > 0:
            return MaterialSummary(weight_lbs=round(total_weight, 2), co2e_kg=round(total_co2e, 2))

    weight = listing_weight(listing)
    if weight <= 0:
        return MaterialSummary()
    co2e = calculate_co2e_kg(getattr(listing, "material_type", None), weight)
    return MaterialSummary(weight_lbs=round(weight, 2), co2e_kg=co2e)


def reduce_metrics(listings: Iterable[Any]) -> DiversionMetrics:
    metrics = DiversionMetrics()
    for listing in listings:
        summary = compute_material_summary(listing)
        metrics.listings += 1
        metrics.pounds += summary.weight_lbs
        metrics.co2e_kg += summary.co2e_kg
    metrics.pounds = round(metrics.pounds, 2)
    metrics.co2e_kg = round(metrics.co2e_kg, 2)
    return metrics


def combine_metrics(a: DiversionMetrics, b: DiversionMetrics) -> DiversionMetrics:
    return DiversionMetrics(
        pounds=round(a.pounds + b.pounds, 2),
        co2e_kg=round(a.co2e_kg + b.co2e_kg, 2),
        listings=a.listings + b.listings,
    )


def unique_by_id(*groups: Iterable[Any]) -> list[Any]:
    seen: set = set()
    merged = []
    for group in groups:
        for listing in group:
            if listing.id in seen:
                continue
            seen.add(listing.id)
            merged.append(listing)
    return merged
