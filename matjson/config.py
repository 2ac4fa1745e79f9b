# matjson/config.py
import dataclasses
import logging
from dataclasses import dataclass

LOG = logging.getLogger(__name__)

# Option names as they appear in converter configuration files written for
# other tools. Mapped onto the attribute names below by `Config.from_dict`.
CAMEL_CASE_OPTIONS = {
    "processSensitives": "process_sensitives",
    "processApproaches": "process_approaches",
    "processRepresenting": "process_representing",
    "processBoundaries": "process_boundaries",
    "processVolumes": "process_volumes",
    "writeData": "write_data",
    "failFast": "fail_fast",
}


@dataclass(frozen=True)
class Config:
    """Field names and steering flags for reading and writing material JSON."""
    # The geometry version, informational only
    geoversion: str = "undefined"
    # The name used for the default logger
    name: str = "JsonGeometryConverter"

    # Document keys
    detkey: str = "detector"
    volkey: str = "volumes"
    namekey: str = "name"
    boukey: str = "boundaries"
    laykey: str = "layers"
    matkey: str = "material"
    appkey: str = "approach"
    senkey: str = "sensitive"
    repkey: str = "representing"
    bin0key: str = "bin0"
    bin1key: str = "bin1"
    transkey: str = "transform"
    typekey: str = "type"
    datakey: str = "data"
    geoidkey: str = "geoid"

    # Which categories of material to handle
    process_sensitives: bool = True
    process_approaches: bool = True
    process_representing: bool = True
    process_boundaries: bool = True
    process_volumes: bool = True

    # False writes a skeleton: type tags and binning only, no values
    write_data: bool = True

    # True aborts an import on the first bad entry, False skips and reports it
    fail_fast: bool = True

    @property
    def bin_keys(self):
        return (self.bin0key, self.bin1key)

    def replace(self, **changes):
        return dataclasses.replace(self, **changes)

    def to_dict(self):
        return dataclasses.asdict(self)

    @classmethod
    def from_dict(cls, data):
        known = {f.name: f for f in dataclasses.fields(cls)}
        kwargs = {}
        for key, value in (data or {}).items():
            name = CAMEL_CASE_OPTIONS.get(key, key)
            if name not in known:
                LOG.warning("Ignoring unknown configuration option '%s'", key)
                continue
            expected = bool if known[name].type in (bool, "bool") else str
            if not isinstance(value, expected):
                raise TypeError(
                    f"Configuration option '{key}' must be {expected.__name__}, got {type(value).__name__}"
                )
            kwargs[name] = value
        return cls(**kwargs)
