# halofind

Building blocks for finding halos in cosmological N-body simulations:
snapshot readers, a configuration file parser, domain decomposition
helpers, a small symmetric eigen-solver and halo catalogue output
utilities. The package needs only the standard library.

## Installation

```
pip install .
```

To run the test suite:

```
pip install ".[test]"
pytest
```

## Modules

- `halofind.config`: `ConfigFile.load` reads `KEY = value` files, ignoring
  `#` comments and stripping surrounding quotes. A file that cannot be
  opened gives an empty configuration; a `FILE_FORMAT` of `KYF` without
  `TOTAL_PARTICLES` raises `ConfigError`. `to_string`, `to_real` and
  `to_real3` read values and record the defaults they fall back to.
  `syntax_check` reports keys that were never read or that appear twice,
  returning the messages and printing them to stderr. `write` saves every
  entry as a quoted `"key" = "value"` line.
- `halofind.io_util`: byte swapping (`swap_endian_4byte`,
  `swap_endian_8byte`, `swap_4byte_to_8byte`, `read_swapped`,
  `read_swapped8`), Fortran unformatted record I/O (`read_fortran`,
  `skip_fortran`, `write_fortran`, raising `FortranRecordError` on bad
  markers) and `particle_range` for splitting particles into near-equal
  blocks.
- `halofind.jacobi`: `jacobi_decompose` returns the eigenvalues and
  eigenvectors of a symmetric 3×3 matrix; `calc_deviations` gives position
  and velocity deviations from a 6×6 correlation matrix;
  `matrix_multiply` and `inv_matrix_multiply` multiply by a matrix or its
  transpose.
- `halofind.particle`: the `Particle` record, with an `id` and six
  phase-space coordinates, and its `position()` and `velocity()`.
- `halofind.kyf`: `load_particles_kyf(path, total_particles)` reads a KYF
  snapshot into a `KyfSnapshot` holding particles in Mpc/h and km/s
  together with the cosmology, box size and particle mass. Pass
  `reverse_endian=True` for files of the other byte order.
- `halofind.tipsy`: `load_particles_tipsy` reads the dark-matter particles
  of a TIPSY snapshot, in XDR or native layout, into a `TipsySnapshot`.
  Gas and star particles are skipped. Particle IDs come from an optional
  `<path>.iord` file (ASCII, native binary or XDR) via `load_ids_tipsy`.
  The single-record readers `read_xdr_header`, `read_xdr_gas`,
  `read_xdr_dark` and `read_xdr_star` are available too. Malformed or
  truncated files raise `TipsyError`.
- `halofind.load_balance`: domain decomposition helpers. `factor_3` splits
  a writer count into three factors and `divide_projection` cuts a particle
  histogram into equal-count slabs. The remaining helpers are
  `sort_chunks`, `populate_bounds`, `volume_balance_bounds` and
  `parse_balance_script_line`, which raises `BalanceScriptError` on bad
  input.
- `halofind.meta_io`: input and output file naming through `InputLayout`
  and `OutputLayout`: `get_input_filename`, `get_output_dirname`,
  `get_output_filename`, `get_outlist_filename`. `read_input_names` reads a
  list of names. Particle post-processing is done with `wrap_periodic` and
  `limit_radius`.
- `halofind.halo_output`: halo selection with `PrintCriteria`,
  `within_bounds`, `should_print`, `count_halos_to_print` and
  `count_particles_to_print`. `ascii_header_info` builds the comment block
  for catalogue headers from a `HeaderInfo`.

## Example

```python
from halofind.config import ConfigFile
from halofind.tipsy import load_particles_tipsy
from halofind.meta_io import wrap_periodic

config = ConfigFile.load("run.cfg")
box_size = config.to_real("BOX_SIZE", 100.0)
config.syntax_check("[Warning]")

snapshot = load_particles_tipsy("snapshot.bin", length_conversion=box_size)
wrap_periodic(snapshot.particles, box_size)
print(len(snapshot.particles), snapshot.scale_now)
```

## What the package does not do

There is no command-line program and no halo finder as such. The package
reads particles, configuration and layouts, and helps select and describe
halos, but it does not group particles into halos. It has no networking:
the load-balance helpers compute bounds, and nothing here sends them to
other processes. It writes no halo catalogue files beyond the header text
returned by `ascii_header_info`. Only KYF and TIPSY snapshots can be read,
and there is no general whitespace-field parser.