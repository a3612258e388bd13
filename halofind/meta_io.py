"""Input/output file naming and particle post-processing after a snapshot is read."""

from __future__ import annotations

import contextlib
import os
import re
from dataclasses import dataclass
from typing import MutableSequence, Sequence

from .particle import Particle

_PLACEHOLDER = re.compile(r"<snap>|<block>")
_PADDED_SNAP_FORMATS = ("GADGET", "LGADGET", "KYF", "AREPO", "GADGET4")


@dataclass
class InputLayout:
    """Where snapshot input files live and how their names are built.

    ``filename`` is a template in which ``<snap>`` and ``<block>`` are replaced
    by the snapshot and block numbers, or by the matching entries of
    ``snapnames`` and ``blocknames`` when those are given.
    """

    inbase: str = "."
    filename: str = ""
    file_format: str = "ASCII"
    num_snaps: int = 1
    files_per_subdir: int = 0
    inbase2: str = ""
    subdir_digits: int = 1
    snapnames: Sequence[str] | None = None
    blocknames: Sequence[str] | None = None


@dataclass
class OutputLayout:
    """Where halo catalogues are written and how their names are built."""

    outbase: str = "."
    output_subdir: bool = False
    snapshot_subdir_digits: int = 1
    files_per_subdir: int = 0
    subdir_digits: int = 1
    snapnames: Sequence[str] | None = None
    outlist_parallel: bool = False


def read_input_names(path: str | os.PathLike) -> list[str] | None:
    """Read one name per line from ``path``, skipping blank lines.

    An empty path means no names file is configured and gives None.
    """
    if not os.fspath(path):
        return None
    with open(path, encoding="utf-8", errors="replace", newline="") as handle:
        names = [line.rstrip("\n") for line in handle]
    return [name for name in names if name]


def _snap_uses_padding(file_format: str) -> bool:
    upper = file_format.upper()
    return any(upper.startswith(prefix) for prefix in _PADDED_SNAP_FORMATS)


def get_input_filename(layout: InputLayout, snap: int, block: int) -> str:
    """The path of input file ``block`` of snapshot ``snap``."""
    if snap >= layout.num_snaps:
        raise ValueError(
            f"snapshot {snap} is out of range for {layout.num_snaps} snapshots"
        )
    prefix = f"{layout.inbase}/"
    if layout.files_per_subdir > 0:
        subdir = block // layout.files_per_subdir
        prefix += (
            f"{layout.inbase2}{snap:03d}/{subdir:0{max(layout.subdir_digits, 1)}d}/"
        )

    def substitute(match: re.Match) -> str:
        if match.group(0) == "<snap>":
            if layout.snapnames is not None:
                return layout.snapnames[snap]
            if _snap_uses_padding(layout.file_format):
                return f"{snap:03d}"
            return str(snap)
        if layout.blocknames is not None:
            return layout.blocknames[block]
        return str(block)

    return prefix + _PLACEHOLDER.sub(substitute, layout.filename)


def get_output_dirname(layout: OutputLayout, snap: int, chunk: int) -> str:
    """The output directory for ``snap`` and ``chunk``, ending in a slash.

    When outputs are spread over subdirectories the chunk's subdirectory is
    created if possible.
    """
    dirname = f"{layout.outbase}/"
    if layout.output_subdir:
        dirname += f"{snap:0{max(layout.snapshot_subdir_digits, 1)}d}/"
    if layout.files_per_subdir > 0:
        subdir = chunk // layout.files_per_subdir
        dirname += f"{subdir:0{max(layout.subdir_digits, 1)}d}/"
        with contextlib.suppress(OSError):
            os.mkdir(dirname, 0o777)
    return dirname


def get_output_filename(layout: OutputLayout, snap: int, chunk: int, kind: str) -> str:
    """The path of the ``kind`` halo output for ``snap`` and ``chunk``."""
    dirname = get_output_dirname(layout, snap, chunk)
    name = layout.snapnames[snap] if layout.snapnames is not None else str(snap)
    return f"{dirname}halos_{name}.{chunk}.{kind}"


def get_outlist_filename(layout: OutputLayout, snap: int, chunk: int) -> str:
    """The path of the merger-tree catalogue (out list) for ``snap``.

    With parallel out lists every chunk has its own file in the output
    directory; otherwise all chunks share one file under the output base.
    """
    dirname = get_output_dirname(layout, snap, chunk)
    if layout.outlist_parallel:
        return f"{dirname}out_{snap}.list-{chunk}"
    return f"{layout.outbase}/out_{snap}.list"


def wrap_periodic(particles: Sequence[Particle], box_size: float) -> None:
    """Move positions that lie just outside a periodic box back inside it."""
    for particle in particles:
        for axis in range(3):
            if particle.pos[axis] > box_size:
                particle.pos[axis] -= box_size
            elif particle.pos[axis] < 0:
                particle.pos[axis] += box_size


def limit_radius(
    particles: MutableSequence[Particle], center: Sequence[float], radius: float
) -> None:
    """Drop particles farther than ``radius`` from ``center``, in place.

    A dropped particle is replaced by the last one in the list, so the order
    of the survivors changes.  A zero radius means no limit.
    """
    if not radius:
        return
    limit = radius * radius
    i = 0
    while i < len(particles):
        distance2 = sum(
            (particles[i].pos[axis] - center[axis]) ** 2 for axis in range(3)
        )
        if distance2 > limit:
            last = particles.pop()
            if i < len(particles):
                particles[i] = last
            continue
        i += 1