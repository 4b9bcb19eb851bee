from .base import BaseSignalFamily
from .clinical import InfectionFamily, NeurovascularFamily, OpenFractureFamily
from .permissive import DEFAULT_FAMILY_ID, PermissiveFamily
from .timing import TimingFamily
from .workup import ConsultFamily, ImagingFamily

__all__ = [
    "BaseSignalFamily",
    "ConsultFamily",
    "DEFAULT_FAMILY_ID",
    "ImagingFamily",
    "InfectionFamily",
    "NeurovascularFamily",
    "OpenFractureFamily",
    "PermissiveFamily",
    "TimingFamily",
]
