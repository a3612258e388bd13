"""Reader for KYF binary particle snapshots."""

from __future__ import annotations

import math
import os
import sys
from array import array
from dataclasses import dataclass, field
from typing import BinaryIO

from .particle import Particle

CRITICAL_DENSITY = 2.77519737e11  # (Msun/h) / (Mpc/h)^3
_MPC_IN_KM = 1.0e6 * 3.08568025e13


@dataclass
class KyfSnapshot:
    """Particles and cosmology read from a KYF file."""

    particles: list[Particle] = field(default_factory=list)
    io_version: int = 0
    num_gas: int = 0
    omega_m: float = 0.0
    omega_b: float = 0.0
    omega_l: float = 0.0
    h0: float = 0.0
    a_start: float = 0.0
    scale_now: float = 0.0
    t_now: float = 0.0
    length_unit: float = 0.0
    mass_unit: float = 0.0
    time_unit: float = 0.0
    box_size: float = 0.0
    particle_mass: float = 0.0
    avg_particle_spacing: float = 0.0


def _read_array(stream: BinaryIO, typecode: str, count: int, swap: bool) -> array:
    values = array(typecode)
    size = values.itemsize * count
    data = stream.read(size)
    if len(data) < size:
        raise EOFError(f"KYF file truncated: expected {size} bytes, got {len(data)}")
    values.frombytes(data)
    if swap:
        values.byteswap()
    return values


def _cbrt(value: float) -> float:
    return math.copysign(abs(value) ** (1.0 / 3.0), value)


def load_particles_kyf(
    path: str | os.PathLike,
    total_particles: int,
    reverse_endian: bool = False,
    critical_density: float = CRITICAL_DENSITY,
) -> KyfSnapshot:
    """Read a KYF snapshot, converting to Mpc/h positions and km/s velocities."""
    if total_particles <= 0:
        raise ValueError("TOTAL_PARTICLES must be positive")

    with open(path, "rb") as stream:
        io_version, npart, ngas = _read_array(stream, "i", 3, reverse_endian)
        if npart < 0:
            raise ValueError(f"negative particle count {npart}")
        omega0, omegab, lambda0, hubble, astart, anow, tnow = _read_array(
            stream, "f", 7, reverse_endian
        )
        lunit, munit, tunit = _read_array(stream, "d", 3, reverse_endian)

        km_s = tunit / (lunit * _MPC_IN_KM)
        box_size = lunit * hubble
        particle_mass = omega0 * critical_density * box_size ** 3 / total_particles
        spacing = _cbrt(particle_mass / (omega0 * critical_density))

        length_scale = lunit * hubble
        velocity_scale = anow / km_s

        raw_pos = _read_array(stream, "f", 3 * npart, reverse_endian)
        raw_vel = _read_array(stream, "f", 3 * npart, reverse_endian)
        ids = _read_array(stream, "q", npart, reverse_endian)

    positions = array("f", (value * length_scale for value in raw_pos))
    velocities = array("f", (value * velocity_scale for value in raw_vel))
    particles = [
        Particle(
            id=pid,
            pos=list(positions[3 * i:3 * i + 3]) + list(velocities[3 * i:3 * i + 3]),
        )
        for i, pid in enumerate(ids)
    ]

    return KyfSnapshot(
        particles=particles,
        io_version=io_version,
        num_gas=ngas,
        omega_m=omega0,
        omega_b=omegab,
        omega_l=lambda0,
        h0=hubble,
        a_start=astart,
        scale_now=anow,
        t_now=tnow,
        length_unit=lunit,
        mass_unit=munit,
        time_unit=tunit,
        box_size=box_size,
        particle_mass=particle_mass,
        avg_particle_spacing=spacing,
    )


NATIVE_BYTEORDER = sys.byteorder