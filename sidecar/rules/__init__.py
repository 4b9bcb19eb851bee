from .registry import SignalFamilyRegistry
from .families import (
    ConsultFamily,
    ImagingFamily,
    InfectionFamily,
    NeurovascularFamily,
    OpenFractureFamily,
    PermissiveFamily,
    TimingFamily,
)


def build_default_registry() -> SignalFamilyRegistry:
    """Registry with the built-in families.

    Keyword matching follows registration order, so timing is checked
    before the clinical and workup families.
    """
    reg = SignalFamilyRegistry()
    reg.register(TimingFamily())
    reg.register(NeurovascularFamily())
    reg.register(OpenFractureFamily())
    reg.register(ConsultFamily())
    reg.register(ImagingFamily())
    reg.register(InfectionFamily())
    reg.set_default(PermissiveFamily())
    return reg


default_registry = build_default_registry()

__all__ = ["default_registry", "SignalFamilyRegistry", "build_default_registry"]
