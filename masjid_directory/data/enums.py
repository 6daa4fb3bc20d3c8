# Closed lists exposed through /api/calculationmethods and /api/services.
# The position of a method in CALCULATION_METHODS is the `method` index the
# timings API expects.

from typing import Optional, Tuple

CALCULATION_METHODS: Tuple[str, ...] = (
    "Jafari / Shia Ithna-Ashari",
    "University of Islamic Sciences, Karachi",
    "Islamic Society of North America",
    "Muslim World League",
    "Umm Al-Qura University, Makkah",
    "Egyptian General Authority of Survey",
    "Institute of Geophysics, University of Tehran",
    "Gulf Region",
    "Kuwait",
    "Qatar",
    "Majlis Ugama Islam Singapura, Singapore",
    "Union Organization islamic de France",
    "Diyanet İşleri Başkanlığı, Turkey",
    "Spiritual Administration of Muslims of Russia",
    "Moonsighting Committee Worldwide (also requires shafaq parameter)",
    "Dubai (experimental)",
    "Jabatan Kemajuan Islam Malaysia (JAKIM)",
    "Tunisia",
    "Algeria",
    "KEMENAG - Kementerian Agama Republik Indonesia",
    "Morocco",
    "Comunidade Islamica de Lisboa",
    "Ministry of Awqaf, Islamic Affairs and Holy Places, Jordan ",
)

SERVICES: Tuple[str, ...] = (
    "funeral",
    "notary",
    "counseling",
)

# Islamic Society of North America
DEFAULT_METHOD_INDEX = 2


def calculation_method_index(name: Optional[str]) -> int:
    """Map a stored method name to the timings API index, ISNA when unknown."""
    try:
        return CALCULATION_METHODS.index(name)
    except ValueError:
        return DEFAULT_METHOD_INDEX
