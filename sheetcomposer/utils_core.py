# Toolkit-free configuration, metadata and path helpers
#
# Qt code imports this as ``from sheetcomposer import utils_core as Utils``.
# Configuration is a two level INI: the system file shipped next to this
# module holds every default, the user file in the home directory only
# the values the user changed.

__all__ = [
    # Metadata
    "__version__", "__prg__", "__title__",
    # Paths
    "prgpath", "iniSystem", "iniUser",
    # Translation
    "_", "N_",
    # Globals
    "config", "language",
    # Functions
    "loadConfiguration", "saveConfiguration", "cleanConfiguration",
    "addSection", "setupLogging",
    "getStr", "getInt", "getFloat", "getBool",
    "setBool", "setStr", "setInt", "setFloat",
    "toFloat", "toInt",
]

import configparser
import gettext
import logging
import os
import sys

from sheetcomposer import __version__

__prg__ = "sheetcomposer"

__platform_fingerprint__ = "({} py{}.{}.{})".format(
    sys.platform,
    sys.version_info.major,
    sys.version_info.minor,
    sys.version_info.micro,
)
__title__ = f"SheetComposer {__version__} {__platform_fingerprint__}"

if getattr(sys, "frozen", False) and hasattr(sys, "_MEIPASS"):
    # PyInstaller bundle: data files are extracted to sys._MEIPASS
    prgpath = sys._MEIPASS
else:
    prgpath = os.path.abspath(os.path.dirname(__file__))
iniSystem = os.path.join(prgpath, f"{__prg__}.ini")
iniUser = os.path.expanduser(f"~/.{__prg__}")


_ = gettext.translation(
    __prg__, os.path.join(prgpath, "locales"), fallback=True
).gettext


def N_(message):
    return message


config = configparser.ConfigParser(interpolation=None)
language = ""

_LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


# -----------------------------------------------------------------------------
# Load configuration
# -----------------------------------------------------------------------------
def loadConfiguration(systemOnly=False):
    global config, language, _
    if systemOnly:
        config.read(iniSystem)
    else:
        config.read([iniSystem, iniUser])

        language = getStr(__prg__, "language")
        if language and language != "en":
            _ = gettext.translation(
                __prg__,
                os.path.join(prgpath, "locales"),
                languages=[language],
                fallback=True,
            ).gettext


# -----------------------------------------------------------------------------
# Save configuration file
# -----------------------------------------------------------------------------
def saveConfiguration():
    cleanConfiguration()
    with open(iniUser, "w") as f:
        config.write(f)


# ----------------------------------------------------------------------
# Remove items that are the same as in the default ini
# ----------------------------------------------------------------------
def cleanConfiguration():
    global config
    newconfig = config  # Remember config
    config = configparser.ConfigParser(interpolation=None)

    loadConfiguration(True)

    # Compare items
    for section in config.sections():
        for item, value in config.items(section):
            try:
                new = newconfig.get(section, item)
                if value == new:
                    newconfig.remove_option(section, item)
            except (configparser.NoOptionError,
                    configparser.NoSectionError):
                pass
    config = newconfig


# -----------------------------------------------------------------------------
# add section if it doesn't exist
# -----------------------------------------------------------------------------
def addSection(section):
    if not config.has_section(section):
        config.add_section(section)


# -----------------------------------------------------------------------------
def setupLogging(level=None):
    """Configure the root logger once, from [sheetcomposer] loglevel."""
    if level is None:
        level = getStr(__prg__, "loglevel", "WARNING").upper()
    logging.basicConfig(
        level=getattr(logging, str(level), logging.WARNING),
        format=_LOG_FORMAT,
    )


# -----------------------------------------------------------------------------
def getStr(section, name, default=""):
    try:
        return config.get(section, name)
    except Exception:
        return default


# -----------------------------------------------------------------------------
def getInt(section, name, default=0):
    try:
        return int(config.get(section, name))
    except Exception:
        return default


# -----------------------------------------------------------------------------
def getFloat(section, name, default=0.0):
    try:
        return float(config.get(section, name))
    except Exception:
        return default


# -----------------------------------------------------------------------------
def getBool(section, name, default=False):
    try:
        return bool(int(config.get(section, name)))
    except Exception:
        return default


# -----------------------------------------------------------------------------
def setBool(section, name, value):
    addSection(section)
    config.set(section, name, str(int(value)))


# -----------------------------------------------------------------------------
def setStr(section, name, value):
    addSection(section)
    config.set(section, name, str(value))


setInt = setStr
setFloat = setStr


# -----------------------------------------------------------------------------
# Lenient numeric parsing for form fields: malformed or zero -> default
# -----------------------------------------------------------------------------
def toFloat(value, default=0.0):
    try:
        result = float(value)
    except (TypeError, ValueError):
        return default
    if result != result or result in (float("inf"), float("-inf")):
        return default
    return result or default


def toInt(value, default=0):
    return int(toFloat(value, default))
