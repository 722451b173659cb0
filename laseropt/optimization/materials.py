"""
optimization/materials.py - Material parameter envelopes.

Each material profile fixes the closed interval every process parameter
must stay in, plus the weights the objective model applies for it.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Dict, Optional, Tuple, Union

from .enums import MaterialType
from .schema import PARAMETER_NAMES, ParameterVector

Interval = Tuple[float, float]


@dataclass(frozen=True)
class MaterialProfile:
    """Parameter ranges and objective weights of one material."""
    material: MaterialType
    power_range: Interval          # W
    speed_range: Interval          # mm/min
    gas_pressure_range: Interval   # bar
    focus_range: Interval          # mm
    quality_weight: float
    cost_weight: float
    energy_weight: float


MATERIAL_PROFILES: Dict[MaterialType, MaterialProfile] = {
    MaterialType.STEEL: MaterialProfile(
        material=MaterialType.STEEL,
        power_range=(500.0, 6000.0),
        speed_range=(500.0, 8000.0),
        gas_pressure_range=(0.5, 20.0),
        focus_range=(-5.0, 2.0),
        quality_weight=0.8,
        cost_weight=1.0,
        energy_weight=0.9,
    ),
    MaterialType.STAINLESS_STEEL: MaterialProfile(
        material=MaterialType.STAINLESS_STEEL,
        power_range=(800.0, 8000.0),
        speed_range=(300.0, 6000.0),
        gas_pressure_range=(8.0, 25.0),
        focus_range=(-6.0, 1.0),
        quality_weight=0.9,
        cost_weight=1.2,
        energy_weight=1.0,
    ),
    MaterialType.ALUMINUM: MaterialProfile(
        material=MaterialType.ALUMINUM,
        power_range=(300.0, 4000.0),
        speed_range=(1000.0, 12000.0),
        gas_pressure_range=(5.0, 20.0),
        focus_range=(-3.0, 3.0),
        quality_weight=0.7,
        cost_weight=0.8,
        energy_weight=0.8,
    ),
    MaterialType.COPPER: MaterialProfile(
        material=MaterialType.COPPER,
        power_range=(1000.0, 10000.0),
        speed_range=(200.0, 4000.0),
        gas_pressure_range=(10.0, 25.0),
        focus_range=(-4.0, 2.0),
        quality_weight=0.6,
        cost_weight=1.5,
        energy_weight=1.2,
    ),
    MaterialType.TITANIUM: MaterialProfile(
        material=MaterialType.TITANIUM,
        power_range=(600.0, 5000.0),
        speed_range=(200.0, 3000.0),
        gas_pressure_range=(12.0, 30.0),
        focus_range=(-5.0, 1.0),
        quality_weight=0.95,
        cost_weight=2.0,
        energy_weight=1.1,
    ),
    MaterialType.BRASS: MaterialProfile(
        material=MaterialType.BRASS,
        power_range=(400.0, 5000.0),
        speed_range=(500.0, 8000.0),
        gas_pressure_range=(5.0, 20.0),
        focus_range=(-4.0, 2.0),
        quality_weight=0.75,
        cost_weight=1.1,
        energy_weight=0.9,
    ),
}


def get_profile(material: Union[MaterialType, str]) -> MaterialProfile:
    """Look up a material profile by enum or value string."""
    if not isinstance(material, MaterialType):
        material = MaterialType(material)
    return MATERIAL_PROFILES[material]


@dataclass(frozen=True)
class ParameterSpace:
    """
    Closed box of admissible parameter vectors.

    All variation operators go through clamp(); normalize() maps each
    coordinate onto [0, 1] for distance computations.
    """
    power: Interval
    speed: Interval
    gas_pressure: Interval
    focus_height: Interval

    @classmethod
    def for_material(
        cls,
        material: Union[MaterialType, str],
        laser_power: Optional[float] = None,
    ) -> "ParameterSpace":
        """
        Build the space for a material, capping power at the available laser.

        When the laser is weaker than the material minimum the power
        interval collapses onto that minimum.
        """
        profile = get_profile(material)
        p_min, p_max = profile.power_range
        if laser_power is not None:
            p_max = max(p_min, min(p_max, float(laser_power)))
        return cls(
            power=(p_min, p_max),
            speed=profile.speed_range,
            gas_pressure=profile.gas_pressure_range,
            focus_height=profile.focus_range,
        )

    def interval(self, name: str) -> Interval:
        return getattr(self, name)

    def span(self, name: str) -> float:
        lower, upper = getattr(self, name)
        return upper - lower

    def midpoint(self) -> ParameterVector:
        return ParameterVector(**{
            name: (self.interval(name)[0] + self.interval(name)[1]) / 2
            for name in PARAMETER_NAMES
        })

    def clamp_value(self, name: str, value: float) -> float:
        lower, upper = getattr(self, name)
        return max(lower, min(upper, value))

    def clamp(self, vector: ParameterVector) -> ParameterVector:
        return ParameterVector(**{
            name: self.clamp_value(name, vector.get(name)) for name in PARAMETER_NAMES
        })

    def contains(self, vector: ParameterVector) -> bool:
        for name in PARAMETER_NAMES:
            lower, upper = getattr(self, name)
            if not lower <= vector.get(name) <= upper:
                return False
        return True

    def normalize_value(self, name: str, value: float) -> float:
        """Map a value onto [0, 1]; a collapsed interval maps to 0."""
        lower, upper = getattr(self, name)
        if upper <= lower:
            return 0.0
        return (value - lower) / (upper - lower)

    def normalize(self, vector: ParameterVector) -> Tuple[float, ...]:
        return tuple(self.normalize_value(name, vector.get(name)) for name in PARAMETER_NAMES)

    def distance(self, a: ParameterVector, b: ParameterVector) -> float:
        """Euclidean distance in bound-normalized space."""
        na, nb = self.normalize(a), self.normalize(b)
        return sum((x - y) ** 2 for x, y in zip(na, nb)) ** 0.5

    def to_dict(self) -> Dict[str, list]:
        return {
            "power": list(self.power),
            "speed": list(self.speed),
            "gasPressure": list(self.gas_pressure),
            "focusHeight": list(self.focus_height),
        }


def bounds(
    material: Union[MaterialType, str],
    laser_power: Optional[float] = None,
) -> ParameterSpace:
    """Parameter bounds of a material."""
    return ParameterSpace.for_material(material, laser_power)
