# matjson/geometry_id.py
import functools

from .errors import IdentifierOverflow

# Field masks, ordered from the top of the hierarchy down.
# The packed integer therefore sorts in the same order as the field tuple.
FIELD_MASKS = {
    "volume":    0xff00000000000000,
    "boundary":  0x00ff000000000000,
    "layer":     0x0000fff000000000,
    "approach":  0x0000000f00000000,
    "sensitive": 0x00000000ffff0000,
    "channel":   0x000000000000ffff,
}
FIELD_NAMES = tuple(FIELD_MASKS)
SHORT_NAMES = {
    "volume": "vol", "boundary": "bnd", "layer": "lay",
    "approach": "apr", "sensitive": "sen", "channel": "chn"
}
MAX_VALUE = (1 << 64) - 1


def _shift(mask):
    # Number of trailing zero bits
    return (mask & -mask).bit_length() - 1


def field_width(name):
    """Number of bits reserved for a field."""
    return bin(FIELD_MASKS[name]).count("1")


def field_max(name):
    return FIELD_MASKS[name] >> _shift(FIELD_MASKS[name])


@functools.total_ordering
class GeometryID:
    """
    Immutable 64-bit geometry identifier.

    The value packs the position of a detector element in the
    volume -> layer -> surface hierarchy. Use `encode` to build one from
    fields and `decode` to get the fields back.
    """
    __slots__ = ("_value",)

    def __init__(self, value=0):
        if isinstance(value, GeometryID):
            value = value.value
        if isinstance(value, bool) or not isinstance(value, int):
            raise TypeError(f"GeometryID value must be an int, got {type(value).__name__}")
        if value < 0 or value > MAX_VALUE:
            raise IdentifierOverflow(f"GeometryID value {value} does not fit into 64 bits")
        self._value = value

    @classmethod
    def encode(cls, volume=0, boundary=0, layer=0, approach=0, sensitive=0, channel=0):
        fields = {
            "volume": volume, "boundary": boundary, "layer": layer,
            "approach": approach, "sensitive": sensitive, "channel": channel
        }
        value = 0
        for name, field_value in fields.items():
            value |= cls._pack(name, field_value)
        return cls(value)

    @staticmethod
    def _pack(name, field_value):
        if isinstance(field_value, bool) or not isinstance(field_value, int):
            raise TypeError(f"Field '{name}' must be an int, got {type(field_value).__name__}")
        if field_value < 0 or field_value > field_max(name):
            raise IdentifierOverflow(
                f"Field '{name}' value {field_value} exceeds its {field_width(name)}-bit range"
            )
        return field_value << _shift(FIELD_MASKS[name])

    @property
    def value(self):
        return self._value

    def get(self, name):
        mask = FIELD_MASKS[name]
        return (self._value & mask) >> _shift(mask)

    def decode(self):
        """Returns the fields as a dict, in hierarchy order."""
        return {name: self.get(name) for name in FIELD_NAMES}

    volume = property(lambda self: self.get("volume"))
    boundary = property(lambda self: self.get("boundary"))
    layer = property(lambda self: self.get("layer"))
    approach = property(lambda self: self.get("approach"))
    sensitive = property(lambda self: self.get("sensitive"))
    channel = property(lambda self: self.get("channel"))

    def replace(self, **fields):
        """Returns a copy with the given fields overwritten."""
        unknown = set(fields) - set(FIELD_NAMES)
        if unknown:
            raise KeyError(f"Unknown GeometryID field(s): {', '.join(sorted(unknown))}")
        current = self.decode()
        current.update(fields)
        return GeometryID.encode(**current)

    def truncated(self, depth):
        """Keeps the first `depth` fields and zeroes the rest."""
        mask = 0
        for name in FIELD_NAMES[:depth]:
            mask |= FIELD_MASKS[name]
        return GeometryID(self._value & mask)

    def volume_id(self):
        return self.truncated(1)

    def layer_id(self):
        return GeometryID.encode(volume=self.volume, layer=self.layer)

    def shares_prefix(self, other, depth):
        """True if all fields up to `depth` match, i.e. both sit in the same branch."""
        return self.truncated(depth) == GeometryID(other).truncated(depth)

    def __int__(self):
        return self._value

    def __index__(self):
        return self._value

    def __eq__(self, other):
        if isinstance(other, GeometryID):
            return self._value == other._value
        return NotImplemented

    def __lt__(self, other):
        if isinstance(other, GeometryID):
            return self._value < other._value
        return NotImplemented

    def __hash__(self):
        return hash(self._value)

    def __repr__(self):
        return f"GeometryID({self})"

    def __str__(self):
        return "|".join(f"{SHORT_NAMES[name]}={self.get(name)}" for name in FIELD_NAMES[:-1]) + \
            (f"|{SHORT_NAMES['channel']}={self.channel}" if self.channel else "")
