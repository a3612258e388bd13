import struct
import sys

import pytest

from halofind.kyf import load_particles_kyf

LUNIT = 200.0
HUBBLE = 0.5
ANOW = 0.5
TUNIT = 200.0 * 1.0e6 * 3.08568025e13
POSITIONS = [(0.25, 0.5, 0.125), (0.75, 0.0, 1.0)]
VELOCITIES = [(2.0, -4.0, 1.0), (0.5, 8.0, -2.0)]
IDS = [7, 2**40 + 3]


def _snapshot_bytes(order):
    npart = len(IDS)
    data = struct.pack(order + "3i", 1, npart, 0)
    data += struct.pack(order + "7f", 0.25, 0.04, 0.75, HUBBLE, 0.01, ANOW, 1.5)
    data += struct.pack(order + "3d", LUNIT, 1.0e10, TUNIT)
    data += struct.pack(order + f"{3 * npart}f", *[v for p in POSITIONS for v in p])
    data += struct.pack(order + f"{3 * npart}f", *[v for p in VELOCITIES for v in p])
    data += struct.pack(order + f"{npart}q", *IDS)
    return data


def _native():
    return "<" if sys.byteorder == "little" else ">"


def _foreign():
    return ">" if sys.byteorder == "little" else "<"


@pytest.fixture
def snapshot_path(tmp_path):
    path = tmp_path / "snap.kyf"
    path.write_bytes(_snapshot_bytes(_native()))
    return path


def test_header_values(snapshot_path):
    snap = load_particles_kyf(snapshot_path, 8)
    assert snap.omega_m == 0.25
    assert snap.omega_l == 0.75
    assert snap.h0 == HUBBLE
    assert snap.scale_now == ANOW
    assert snap.box_size == pytest.approx(100.0)


def test_ids_preserved(snapshot_path):
    snap = load_particles_kyf(snapshot_path, 8)
    assert [p.id for p in snap.particles] == IDS


def test_positions_scaled_by_box(snapshot_path):
    snap = load_particles_kyf(snapshot_path, 8)
    for particle, raw in zip(snap.particles, POSITIONS):
        assert particle.position() == pytest.approx([r * snap.box_size for r in raw])


def test_velocities_scaled_by_scale_factor(snapshot_path):
    snap = load_particles_kyf(snapshot_path, 8)
    for particle, raw in zip(snap.particles, VELOCITIES):
        assert particle.velocity() == pytest.approx([r * ANOW for r in raw])


def test_particle_mass_and_spacing(snapshot_path):
    density = 1.0e3
    snap = load_particles_kyf(snapshot_path, 8, critical_density=density)
    assert snap.particle_mass * 8 == pytest.approx(0.25 * density * snap.box_size ** 3)
    assert snap.avg_particle_spacing ** 3 == pytest.approx(snap.box_size ** 3 / 8)


def test_reverse_endian_matches_native(tmp_path, snapshot_path):
    foreign = tmp_path / "foreign.kyf"
    foreign.write_bytes(_snapshot_bytes(_foreign()))
    native = load_particles_kyf(snapshot_path, 8)
    swapped = load_particles_kyf(foreign, 8, reverse_endian=True)
    assert swapped == native


def test_truncated_file(tmp_path):
    path = tmp_path / "short.kyf"
    path.write_bytes(_snapshot_bytes(_native())[:-4])
    with pytest.raises(EOFError):
        load_particles_kyf(path, 8)


def test_total_particles_must_be_positive(snapshot_path):
    with pytest.raises(ValueError):
        load_particles_kyf(snapshot_path, 0)