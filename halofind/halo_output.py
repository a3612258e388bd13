"""Choosing which halos to print and writing the ASCII catalogue header."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Protocol, Sequence

Bounds = Sequence[float]


class HaloLike(Protocol):
    """What the print filter needs from a halo."""

    pos: Sequence[float]
    flags: int
    num_p: int
    m: float
    mgrav: float


@dataclass(frozen=True)
class PrintCriteria:
    """Thresholds that decide whether a halo appears in the output."""

    min_halo_output_size: int
    unbound_threshold: float
    particle_mass: float
    always_print_flag: int


@dataclass(frozen=True)
class HeaderInfo:
    """Run parameters reported at the top of ASCII halo catalogues."""

    scale_now: float
    om: float
    ol: float
    h0: float
    fof_linking_length: float
    unbound_threshold: float
    fof_fraction: float
    particle_mass: float
    box_size: float
    force_res: float
    strict_so_masses: bool
    version: str
    program_name: str = "halofind"


_UNITS = (
    "#Units: Masses in Msun / h\n"
    "#Units: Positions in Mpc / h (comoving)\n"
    "#Units: Velocities in km / s (physical, peculiar)\n"
    "#Units: Halo Distances, Lengths, and Radii in kpc / h (comoving)\n"
    "#Units: Angular Momenta in (Msun/h) * (Mpc/h) * km/s (physical)\n"
    "#Units: Spins are dimensionless\n"
)

_PARTICLE_UNITS = (
    "#Units: Total energy in (Msun/h)*(km/s)^2 (physical)\n"
    "#Note: idx, i_so, and i_ph are internal debugging quantities\n"
)


def within_bounds(pos: Sequence[float], bounds: Bounds | None) -> bool:
    """Whether the first three coordinates lie inside ``(min_xyz, max_xyz)``.

    No bounds means everything is inside.
    """
    if bounds is None:
        return True
    return all(bounds[i] <= pos[i] <= bounds[i + 3] for i in range(3))


def should_print(halo: HaloLike, bounds: Bounds | None, criteria: PrintCriteria) -> bool:
    """Whether a halo is inside the bounds and passes the output filters."""
    if not within_bounds(halo.pos, bounds):
        return False
    if halo.flags & criteria.always_print_flag:
        return True
    if halo.num_p < criteria.min_halo_output_size:
        return False
    if halo.m * criteria.unbound_threshold >= halo.mgrav:
        return False
    if halo.mgrav < 1.5 * criteria.particle_mass and criteria.unbound_threshold > 0:
        return False
    return True


def count_halos_to_print(
    halos: Iterable[HaloLike], bounds: Bounds | None, criteria: PrintCriteria
) -> int:
    """The number of halos that would be printed."""
    return sum(1 for halo in halos if should_print(halo, bounds, criteria))


def count_particles_to_print(
    halos: Iterable[HaloLike], bounds: Bounds | None, criteria: PrintCriteria
) -> int:
    """The total particle count of the halos that would be printed."""
    return sum(halo.num_p for halo in halos if should_print(halo, bounds, criteria))


def ascii_header_info(info: HeaderInfo, bounds: Bounds | None, num_particles: int) -> str:
    """The comment block describing a run, as written atop ASCII catalogues.

    ``num_particles`` is zero for merger-tree lists, which changes which lines
    appear.
    """
    lines = [f"#a = {info.scale_now:f}\n"]
    if bounds is not None:
        lines.append(
            "#Bounds: ({:f}, {:f}, {:f}) - ({:f}, {:f}, {:f})\n".format(*bounds[:6])
        )
    lines.append(f"#Om = {info.om:f}; Ol = {info.ol:f}; h = {info.h0:f}\n")
    lines.append(f"#FOF linking length: {info.fof_linking_length:f}\n")
    lines.append(
        f"#Unbound Threshold: {info.unbound_threshold:f}; "
        f"FOF Refinement Threshold: {info.fof_fraction:f}\n"
    )
    lines.append(f"#Particle mass: {info.particle_mass:.5e} Msun/h\n")
    lines.append(f"#Box size: {info.box_size:f} Mpc/h\n")
    if num_particles:
        lines.append(f"#Total particles processed: {num_particles}\n")
    lines.append(f"#Force resolution assumed: {info.force_res:g} Mpc/h\n")
    if info.strict_so_masses and not num_particles:
        lines.append("#Using Strict Spherical Overdensity Masses\n")
    lines.append(_UNITS)
    if num_particles:
        lines.append(_PARTICLE_UNITS)
    lines.append("#Np is an internal debugging quantity.\n")
    lines.append(f"#{info.program_name} Version: {info.version}\n")
    return "".join(lines)