"""
Driver to run a pizza case from a YAML file.

Responsibilities:
- Load the YAML case into composition, procedure, baking instruments and
  solver configs.
- Create the recipe (yeast solve, mass balance, water temperature, schedule).
- Compute the baking instructions when an oven block is present.
- Log the results; stop with a non-zero exit code on failure.
"""

from __future__ import annotations

import argparse
import logging
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Sequence

import yaml

from core.composition import DoughComposition, DoughCompositionBuilder, DoughError
from core.logging_utils import get_log_level_from_env, setup_logging
from core.schedule import format_schedule
from core.types import (
    BakingConfig,
    LeaveningConfig,
    LeaveningStage,
    Procedure,
    RecipeMassConfig,
    StretchAndFoldStage,
    ThermalConfig,
)
from driver.pizza import bake_recipe, create_recipe
from properties.ingredients import Atmosphere, FatType, Flour, SugarType, YeastType
from properties.oven import (
    BakingInstruments,
    BakingPan,
    BakingPanMaterial,
    CircularBakingPan,
    OvenType,
    RectangularBakingPan,
)
from properties.yeast_db import REFERENCE_STRAIN, load_yeast_db
from properties.yeast_models import YeastModel
from solvers.baking import OvenError
from solvers.leavening import YeastError
from solvers.timestepper import ThermalIntegrationError

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class RecipeCase:
    """Everything needed to run one case."""

    name: str
    composition: DoughComposition
    procedure: Procedure
    target_dough_weight: float
    yeast_model: YeastModel
    ingredients_temperature: Optional[float] = None
    dough_temperature: Optional[float] = None
    target_height: Optional[float] = None
    instruments: Optional[BakingInstruments] = None
    leavening: LeaveningConfig = field(default_factory=LeaveningConfig)
    mass: RecipeMassConfig = field(default_factory=RecipeMassConfig)
    baking: BakingConfig = field(default_factory=BakingConfig)


def _read_yaml_text(cfg_file: Path) -> str:
    try:
        return cfg_file.read_text(encoding="utf-8-sig")
    except UnicodeDecodeError:
        return cfg_file.read_text()


def _resolve_path(base: Path, p: str | Path) -> Path:
    path = Path(p).expanduser()
    if not path.is_absolute():
        path = (base / path).resolve()
    return path


def _enum_member(enum_cls, name: str):
    key = str(name).strip().upper().replace(" ", "_").replace("-", "_")
    try:
        return enum_cls[key]
    except KeyError:
        raise ValueError(
            f"Unknown {enum_cls.__name__} '{name}', available: {[m.name for m in enum_cls]}"
        ) from None


def _minutes(raw: Mapping[str, Any], key: str, default: float = 0.0) -> timedelta:
    return timedelta(minutes=float(raw.get(key, default)))


def _parse_time_to_bake(value: Any) -> Optional[datetime]:
    if value is None:
        return None
    if isinstance(value, datetime):
        return value
    return datetime.fromisoformat(str(value))


def _build_composition(raw: Mapping[str, Any]) -> DoughComposition:
    builder = DoughCompositionBuilder()

    water = raw.get("water", [])
    if isinstance(water, (int, float)):
        water = [{"quantity": water}]
    for source in water:
        builder.add_water(
            float(source["quantity"]),
            chlorine_dioxide=float(source.get("chlorine_dioxide", 0.0)),
            fixed_residue=float(source.get("fixed_residue", 0.0)),
            **({"ph": float(source["ph"])} if "ph" in source else {}),
        )

    sugar = raw.get("sugar")
    if sugar is not None:
        builder.add_sugar(
            float(sugar["quantity"]),
            _enum_member(SugarType, sugar.get("type", "SUCROSE")),
            carbohydrate=float(sugar.get("carbohydrate", 1.0)),
            water_content=float(sugar.get("water_content", 0.0)),
        )

    fat = raw.get("fat")
    if fat is not None:
        builder.add_fat(
            float(fat["quantity"]),
            _enum_member(FatType, fat.get("type", "OLIVE_OIL")),
            fat_content=float(fat.get("fat_content", 1.0)),
            water_content=float(fat.get("water_content", 0.0)),
            salt_content=float(fat.get("salt_content", 0.0)),
            density=float(fat.get("density", 0.913)),
        )

    if "salt" in raw:
        builder.add_salt(float(raw["salt"]))

    yeast = raw.get("yeast", {})
    builder.with_yeast(
        _enum_member(YeastType, yeast.get("type", "FRESH")),
        float(yeast.get("raw", 1.0)),
    )

    if "flour" in raw:
        builder.with_flour(Flour(**raw["flour"]))
    if "atmosphere" in raw:
        builder.with_atmosphere(Atmosphere(**raw["atmosphere"]))

    builder.with_correct_for_ingredients(bool(raw.get("correct_for_ingredients", False)))
    builder.with_correct_for_humidity(bool(raw.get("correct_for_humidity", False)))
    return builder.build()


def _build_procedure(raw: Mapping[str, Any]) -> Procedure:
    stages = tuple(
        LeaveningStage(
            temperature=float(s["temperature"]),
            duration=timedelta(hours=float(s["duration_hours"])),
            after_stage_work=_minutes(s, "after_stage_work_minutes"),
        )
        for s in raw["stages"]
    )
    folds = tuple(
        StretchAndFoldStage(lapse=timedelta(minutes=float(m)))
        for m in raw.get("stretch_and_fold_minutes", [])
    )
    return Procedure(
        stages=stages,
        target_volume_expansion_ratio=float(raw["target_volume_expansion_ratio"]),
        target_stage=int(raw.get("target_stage", len(stages) - 1)),
        stretch_and_fold=folds,
        dough_making=_minutes(raw, "dough_making_minutes"),
        seasoning=_minutes(raw, "seasoning_minutes"),
        time_to_bake=_parse_time_to_bake(raw.get("time_to_bake")),
    )


def _build_pan(raw: Mapping[str, Any]) -> BakingPan:
    shape = str(raw.get("shape", "circular")).lower()
    material = _enum_member(BakingPanMaterial, raw.get("material", "ALUMINIUM"))
    thickness = float(raw.get("thickness", 0.002))
    if shape == "circular":
        return CircularBakingPan(float(raw["diameter"]), material, thickness)
    if shape == "rectangular":
        return RectangularBakingPan(float(raw["width"]), float(raw["length"]), material, thickness)
    raise ValueError(f"Unknown pan shape '{shape}' (expected 'circular' or 'rectangular')")


def _build_instruments(raw: Mapping[str, Any], atmosphere: Atmosphere) -> BakingInstruments:
    pans = tuple(_build_pan(p) for p in raw.get("pans", []))
    return BakingInstruments(
        oven_type=_enum_member(OvenType, raw.get("type", "FORCED_CONVECTION")),
        baking_pans=pans,
        ambient_temperature=float(raw.get("ambient_temperature", 20.0)),
        atmosphere=atmosphere,
        cheese_thickness=float(raw.get("cheese_thickness", 0.002)),
        sauce_thickness=float(raw.get("sauce_thickness", 0.0015)),
        preheated_pan=bool(raw.get("preheated_pan", False)),
        top_heater=bool(raw.get("top_heater", True)),
        bottom_heater=bool(raw.get("bottom_heater", True)),
    )


def _load_case_config(cfg_path: str) -> RecipeCase:
    """Load YAML file into a RecipeCase."""
    cfg_file = Path(cfg_path).expanduser().resolve()
    raw = yaml.safe_load(_read_yaml_text(cfg_file))
    if not isinstance(raw, dict):
        raise ValueError(f"Invalid case file {cfg_file}: expected a mapping at top level")
    base = cfg_file.parent

    case_raw = raw.get("case", {})
    composition = _build_composition(raw["dough"])
    procedure = _build_procedure(raw["procedure"])

    yeast_raw = raw.get("yeast_strain", {})
    if isinstance(yeast_raw, str):
        yeast_raw = {"name": yeast_raw}
    db_path = yeast_raw.get("database")
    db = load_yeast_db(_resolve_path(base, db_path) if db_path is not None else None)
    yeast_model = db.get_model(yeast_raw.get("name", REFERENCE_STRAIN))

    temps = raw.get("temperatures", {})
    solver_raw: Dict[str, Any] = raw.get("solver", {})
    baking_raw = dict(solver_raw.get("baking", {}))
    thermal = ThermalConfig(**baking_raw.pop("thermal", {}))

    oven_raw = raw.get("oven")
    instruments = (
        _build_instruments(oven_raw, composition.atmosphere) if oven_raw is not None else None
    )

    return RecipeCase(
        name=str(case_raw.get("id", cfg_file.stem)),
        composition=composition,
        procedure=procedure,
        target_dough_weight=float(case_raw["target_dough_weight"]),
        yeast_model=yeast_model,
        ingredients_temperature=temps.get("ingredients"),
        dough_temperature=temps.get("dough"),
        target_height=case_raw.get("target_height"),
        instruments=instruments,
        leavening=LeaveningConfig(**solver_raw.get("leavening", {})),
        mass=RecipeMassConfig(**solver_raw.get("mass", {})),
        baking=BakingConfig(thermal=thermal, **baking_raw),
    )


def run_case(cfg_path: str, *, log_level: int | str = logging.INFO, log_file: Optional[str] = None) -> int:
    """Run one pizza case. Return 0 on success, non-zero on failure."""
    level = get_log_level_from_env(default=log_level)
    setup_logging(level=level, log_file=log_file)

    try:
        case = _load_case_config(cfg_path)
    except (OSError, KeyError, TypeError, ValueError, yaml.YAMLError) as exc:
        logger.error("Cannot load case %s: %s", cfg_path, exc)
        return 2

    logger.info("Case '%s' with yeast %s", case.name, case.yeast_model.name)
    try:
        recipe = create_recipe(
            case.composition,
            case.procedure,
            case.target_dough_weight,
            yeast_model=case.yeast_model,
            ingredients_temperature=case.ingredients_temperature,
            dough_temperature=case.dough_temperature,
            leavening_config=case.leavening,
            mass_config=case.mass,
        )
    except (DoughError, YeastError, ValueError) as exc:
        logger.error("Recipe creation failed: %s", exc)
        return 1

    if recipe.water_temperature is not None:
        logger.info("Water temperature: %.1f °C", recipe.water_temperature)
    if recipe.schedule is not None:
        for line in format_schedule(recipe.schedule):
            logger.info("Schedule: %s", line)

    if case.instruments is None or case.target_height is None:
        logger.info("No oven block or target height: skipping baking")
        return 0

    try:
        instructions = bake_recipe(
            recipe, float(case.target_height), case.instruments, config=case.baking
        )
    except (OvenError, ThermalIntegrationError, ValueError) as exc:
        logger.error("Baking failed: %s", exc)
        return 1

    logger.info(
        "Baking: %.1f °C for %s",
        instructions.baking_temperature,
        instructions.baking_duration,
    )
    return 0


def _parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Create a pizza recipe and its baking instructions.")
    parser.add_argument("case_yaml", help="Path to case YAML file.")
    parser.add_argument(
        "--log-level",
        default="INFO",
        help="Logging level (overridden by PIZZA_LOG_LEVEL / PIZZA_DEBUG).",
    )
    parser.add_argument(
        "--log-file",
        default=None,
        help="Also write the log to this file.",
    )
    return parser.parse_args(argv)


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = _parse_args(argv)
    return run_case(args.case_yaml, log_level=args.log_level, log_file=args.log_file)


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
