"""Reader for TIPSY particle snapshots in XDR (big-endian) or native layout."""

from __future__ import annotations

import logging
import os
import struct
from array import array
from dataclasses import dataclass, field
from typing import BinaryIO

from .particle import Particle

logger = logging.getLogger(__name__)

TIPSY_MAXDIM = 3
MAX_IORD_BODIES = 10_000_000

# XDR layouts: everything big-endian, header padded with one extra int.
_XDR_HEADER = struct.Struct(">d6i")
_XDR_GAS = struct.Struct(">12f")
_XDR_DARK = struct.Struct(">9f")
_XDR_STAR = struct.Struct(">11f")
_XDR_INT = struct.Struct(">i")

# Native layouts, with the alignment padding the in-memory structs carry.
_NATIVE_HEADER = struct.Struct("=d5i4x")
_NATIVE_GAS = struct.Struct("=12f")
_NATIVE_DARK = struct.Struct("=9f")
_NATIVE_INT = struct.Struct("=i")

_C_SPACE = " \t\n\v\f\r"


class TipsyError(ValueError):
    """Raised when a TIPSY file is truncated or malformed."""


@dataclass(frozen=True)
class TipsyHeader:
    """The snapshot header: expansion factor and particle counts."""

    time: float
    nbodies: int
    ndim: int
    nsph: int
    ndark: int
    nstar: int


@dataclass(frozen=True)
class TipsyGasParticle:
    """A gas (SPH) particle record."""

    mass: float
    pos: tuple[float, float, float]
    vel: tuple[float, float, float]
    rho: float
    temp: float
    hsmooth: float
    metals: float
    phi: float


@dataclass(frozen=True)
class TipsyDarkParticle:
    """A dark-matter particle record."""

    mass: float
    pos: tuple[float, float, float]
    vel: tuple[float, float, float]
    eps: float
    phi: float


@dataclass(frozen=True)
class TipsyStarParticle:
    """A star particle record."""

    mass: float
    pos: tuple[float, float, float]
    vel: tuple[float, float, float]
    metals: float
    tform: float
    eps: float
    phi: float


@dataclass
class TipsySnapshot:
    """Dark-matter particles read from a TIPSY file, with its header."""

    header: TipsyHeader
    particles: list[Particle] = field(default_factory=list)
    scale_now: float = 0.0
    xdr: bool = True


def _read_record(stream: BinaryIO, layout: struct.Struct, what: str) -> tuple:
    data = stream.read(layout.size)
    if len(data) < layout.size:
        raise TipsyError(f"truncated TIPSY {what} record")
    return layout.unpack(data)


def read_xdr_header(stream: BinaryIO) -> TipsyHeader:
    """Read an XDR-encoded header, including its trailing pad word."""
    time, nbodies, ndim, nsph, ndark, nstar, _pad = _read_record(
        stream, _XDR_HEADER, "header"
    )
    return TipsyHeader(time, nbodies, ndim, nsph, ndark, nstar)


def _gas(values: tuple) -> TipsyGasParticle:
    return TipsyGasParticle(
        values[0], tuple(values[1:4]), tuple(values[4:7]), *values[7:12]
    )


def _dark(values: tuple) -> TipsyDarkParticle:
    return TipsyDarkParticle(
        values[0], tuple(values[1:4]), tuple(values[4:7]), values[7], values[8]
    )


def _star(values: tuple) -> TipsyStarParticle:
    return TipsyStarParticle(
        values[0], tuple(values[1:4]), tuple(values[4:7]), *values[7:11]
    )


def read_xdr_gas(stream: BinaryIO) -> TipsyGasParticle:
    """Read one XDR-encoded gas particle."""
    return _gas(_read_record(stream, _XDR_GAS, "gas particle"))


def read_xdr_dark(stream: BinaryIO) -> TipsyDarkParticle:
    """Read one XDR-encoded dark-matter particle."""
    return _dark(_read_record(stream, _XDR_DARK, "dark particle"))


def read_xdr_star(stream: BinaryIO) -> TipsyStarParticle:
    """Read one XDR-encoded star particle."""
    return _star(_read_record(stream, _XDR_STAR, "star particle"))


class _TextScanner:
    """Just enough of scanf's integer matching for the ASCII iord format."""

    def __init__(self, text: str) -> None:
        self.text = text
        self.pos = 0

    def _skip_space(self) -> None:
        while self.pos < len(self.text) and self.text[self.pos] in _C_SPACE:
            self.pos += 1

    def read_int(self) -> int | None:
        self._skip_space()
        start = self.pos
        end = start
        if end < len(self.text) and self.text[end] in "+-":
            end += 1
        digits_start = end
        while end < len(self.text) and self.text[end].isdigit():
            end += 1
        if end == digits_start:
            return None
        self.pos = end
        return int(self.text[start:end])

    def skip_separators(self) -> bool:
        start = self.pos
        while self.pos < len(self.text) and self.text[self.pos] in ", \t":
            self.pos += 1
        return self.pos > start


def _parse_ascii_iords(text: str) -> tuple[bool, list[int] | None]:
    """Returns (is_ascii, ids); ids is None when the body is malformed."""
    scanner = _TextScanner(text)
    nbodies = scanner.read_int()
    if nbodies is None:
        return False, None
    # The first line may carry two further counts after the total.
    if scanner.skip_separators() and scanner.read_int() is not None:
        if scanner.skip_separators():
            scanner.read_int()
    ids = []
    for _ in range(max(nbodies, 0)):
        value = scanner.read_int()
        if value is None:
            return True, None
        ids.append(value)
    if len(ids) != nbodies:
        return True, None
    return True, ids


def _parse_binary_iords(data: bytes, name: str) -> list[int] | None:
    if len(data) < 4:
        logger.info("<%s format is wrong>", name)
        return None
    layout = _NATIVE_INT
    (nbodies,) = _NATIVE_INT.unpack_from(data)
    if not 0 < nbodies <= MAX_IORD_BODIES:
        (nbodies,) = _XDR_INT.unpack_from(data)
        if not 0 < nbodies <= MAX_IORD_BODIES:
            logger.info(
                "<%s doesn't appear standard or binary or nbodies > 10 mil.>", name
            )
            return None
        layout = _XDR_INT
    body = data[4:4 + 4 * nbodies]
    if len(body) < 4 * nbodies:
        logger.info("<%s format is wrong>", name)
        return None
    byteorder = ">" if layout is _XDR_INT else "="
    return list(struct.unpack(f"{byteorder}{nbodies}i", body))


def load_ids_tipsy(path: str | os.PathLike) -> list[int] | None:
    """Read particle IDs from the ``<path>.iord`` companion file.

    The file may be ASCII, native binary or XDR.  Returns None, with a
    warning, when it is missing or cannot be understood.
    """
    name = f"{os.fspath(path)}.iord"
    ids: list[int] | None = None
    try:
        with open(name, "rb") as handle:
            data = handle.read()
    except OSError:
        data = None

    if data is not None:
        is_ascii, ids = _parse_ascii_iords(data.decode("latin-1"))
        if not is_ascii:
            ids = _parse_binary_iords(data, name)
        elif ids is None:
            logger.info("<%s format is wrong>", name)

    if ids is None:
        logger.warning(
            "Did not read TIPSY iords file; particle IDs may not be correct."
        )
        return None
    logger.info("Read %d iords.", len(ids))
    return ids


def _to_float32(values: list[float]) -> list[float]:
    return list(array("f", values))


def load_particles_tipsy(
    path: str | os.PathLike,
    length_conversion: float = 1.0,
    velocity_conversion: float = 1.0,
) -> TipsySnapshot:
    """Read the dark-matter particles of a TIPSY snapshot.

    Gas and star particles are skipped.  Positions are shifted by one half and
    scaled by ``length_conversion``; velocities are scaled by
    ``velocity_conversion`` and the snapshot's expansion factor.
    """
    with open(path, "rb") as stream:
        try:
            header = read_xdr_header(stream)
        except TipsyError:
            header = None
        xdr = header is not None and header.ndim == 3
        if not xdr:
            stream.seek(0)
            time, nbodies, ndim, nsph, ndark, nstar = _read_record(
                stream, _NATIVE_HEADER, "header"
            )
            header = TipsyHeader(time, nbodies, ndim, nsph, ndark, nstar)
            if header.ndim != 3:
                raise TipsyError(f"TIPSY file {path} does not have 3 dimensions")

        scale_now = header.time
        ids = load_ids_tipsy(path)
        total = header.nsph + header.ndark + header.nstar
        if ids is not None and len(ids) < total:
            raise TipsyError(
                f"Not enough IDs for total number of particles in Tipsy file {path}!"
            )

        if xdr:
            for _ in range(header.nsph):
                read_xdr_gas(stream)
        else:
            stream.seek(_NATIVE_GAS.size * header.nsph, os.SEEK_CUR)
        logger.warning(
            "Skipping TIPSY gas and star particles and calculating halos "
            "from dark matter only."
        )

        particles = []
        for i in range(header.ndark):
            if xdr:
                dark = read_xdr_dark(stream)
            else:
                dark = _dark(_read_record(stream, _NATIVE_DARK, "dark particle"))
            index = i + header.nsph
            pid = ids[index] if ids is not None else index
            coords = [(x + 0.5) * length_conversion for x in dark.pos] + [
                v * velocity_conversion * scale_now for v in dark.vel
            ]
            particles.append(Particle(id=pid, pos=_to_float32(coords)))

    return TipsySnapshot(header=header, particles=particles, scale_now=scale_now, xdr=xdr)