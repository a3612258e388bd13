from dataclasses import dataclass, field

import pytest

from halofind.halo_output import (
    HeaderInfo,
    PrintCriteria,
    ascii_header_info,
    count_halos_to_print,
    count_particles_to_print,
    should_print,
    within_bounds,
)

FLAG = 1 << 20


@dataclass
class FakeHalo:
    pos: list = field(default_factory=lambda: [5.0, 5.0, 5.0, 0.0, 0.0, 0.0])
    flags: int = 0
    num_p: int = 100
    m: float = 1.0e12
    mgrav: float = 1.0e12


CRITERIA = PrintCriteria(
    min_halo_output_size=20,
    unbound_threshold=0.5,
    particle_mass=1.0e9,
    always_print_flag=FLAG,
)

BOX = [0.0, 0.0, 0.0, 10.0, 10.0, 10.0]


def make_info(**overrides):
    values = dict(
        scale_now=1.0,
        om=0.3,
        ol=0.7,
        h0=0.7,
        fof_linking_length=0.28,
        unbound_threshold=0.5,
        fof_fraction=0.7,
        particle_mass=1.0e9,
        box_size=100.0,
        force_res=0.01,
        strict_so_masses=False,
        version="1.0",
    )
    values.update(overrides)
    return HeaderInfo(**values)


def test_within_bounds_none_accepts_everything():
    assert within_bounds([1e9, -1e9, 0.0], None) is True


def test_within_bounds_edges_inclusive():
    assert within_bounds([0.0, 10.0, 5.0], BOX) is True
    assert within_bounds([10.5, 5.0, 5.0], BOX) is False
    assert within_bounds([5.0, 5.0, -0.1], BOX) is False


def test_should_print_normal_halo():
    assert should_print(FakeHalo(), BOX, CRITERIA) is True


def test_should_print_rejects_outside_bounds_even_with_flag():
    halo = FakeHalo(pos=[20.0, 5.0, 5.0, 0, 0, 0], flags=FLAG)
    assert should_print(halo, BOX, CRITERIA) is False


def test_should_print_flag_overrides_filters():
    halo = FakeHalo(num_p=1, mgrav=0.0, flags=FLAG)
    assert should_print(halo, BOX, CRITERIA) is True


def test_should_print_rejects_small_halo():
    assert should_print(FakeHalo(num_p=19), None, CRITERIA) is False
    assert should_print(FakeHalo(num_p=20), None, CRITERIA) is True


def test_should_print_rejects_mostly_unbound():
    assert should_print(FakeHalo(m=2.0e12, mgrav=1.0e12), None, CRITERIA) is False


def test_should_print_rejects_tiny_bound_mass():
    halo = FakeHalo(m=1.0e9, mgrav=1.4e9)
    assert should_print(halo, None, CRITERIA) is False
    no_unbinding = PrintCriteria(20, 0.0, 1.0e9, FLAG)
    assert should_print(halo, None, no_unbinding) is True


def test_counts_agree_with_filter():
    halos = [
        FakeHalo(num_p=50),
        FakeHalo(num_p=5),
        FakeHalo(num_p=30, pos=[50.0, 5, 5, 0, 0, 0]),
        FakeHalo(num_p=70),
    ]
    printed = [h for h in halos if should_print(h, BOX, CRITERIA)]
    assert count_halos_to_print(halos, BOX, CRITERIA) == len(printed) == 2
    assert count_particles_to_print(halos, BOX, CRITERIA) == sum(h.num_p for h in printed)


def test_counts_of_empty_list_are_zero():
    assert count_halos_to_print([], None, CRITERIA) == 0
    assert count_particles_to_print([], None, CRITERIA) == 0


def test_header_fixed_lines():
    text = ascii_header_info(make_info(), None, 0)
    lines = text.splitlines()
    assert lines[0] == "#a = 1.000000"
    assert "#Om = 0.300000; Ol = 0.700000; h = 0.700000" in lines
    assert "#Box size: 100.000000 Mpc/h" in lines
    assert "#Force resolution assumed: 0.01 Mpc/h" in lines
    assert lines[-1] == "#halofind Version: 1.0"
    assert "#Bounds" not in text
    assert "#Total particles processed" not in text


def test_header_with_bounds_and_particles():
    text = ascii_header_info(make_info(), BOX, 1234)
    assert "#Bounds: (0.000000, 0.000000, 0.000000) - (10.000000, 10.000000, 10.000000)\n" in text
    assert "#Total particles processed: 1234\n" in text
    assert "#Note: idx, i_so, and i_ph are internal debugging quantities\n" in text


def test_header_strict_so_only_without_particles():
    info = make_info(strict_so_masses=True)
    marker = "#Using Strict Spherical Overdensity Masses\n"
    assert marker in ascii_header_info(info, None, 0)
    assert marker not in ascii_header_info(info, None, 10)


@pytest.mark.parametrize("num_particles", [0, 7])
def test_header_lines_are_comments(num_particles):
    text = ascii_header_info(make_info(), BOX, num_particles)
    assert text.endswith("\n")
    assert all(line.startswith("#") for line in text.splitlines())