# syslabs

Tools for working through classic computer-systems exercises:

- levelled console reporting with an optional log file, and a wall-clock
  timer (`syslabs.report`);
- an allocator that tracks blocks and detects misuse, with guarded
  execution under a time limit (`syslabs.harness`);
- a line-oriented command interpreter with options, nested `source` files
  and `select` integration (`syslabs.console`);
- 32-bit integer and IEEE-754 single-precision bit puzzles
  (`syslabs.bits`) with straightforward reference versions
  (`syslabs.reference`);
- a set-associative LRU cache simulator and cache-friendly matrix
  transposes (`syslabs.cachesim`, `syslabs.cachelab`, `syslabs.transpose`).

## Installation

```
pip install .
pip install ".[test]"   # with pytest and hypothesis for the test suite
```

## Reporting

`Reporter` prints messages whose level is within its `verblevel`.
`report` adds a newline, `report_noreturn` does not, and `set_logfile`
copies further output to a file. `report_event` takes a `MessageType`
(`WARN`, `ERROR`, `FATAL`); a fatal event, like `fail`, raises
`FatalError`. `Timer.delta()` returns the seconds since the previous call.

## Checking allocator

```python
from syslabs.harness import Allocator

alloc = Allocator()
block = alloc.allocate("payload")
alloc.release(block)
alloc.allocation_check()   # 0
alloc.error_check()        # False; a double release would make it True
```

`fail_probability` (a percentage) makes `allocate` raise
`AllocationError` at random. Inside `with alloc.noallocate():` any
allocation or release is fatal. `with alloc.guard(limit_time=True) as g:`
runs code that may call `alloc.trigger(msg)`; the message is reported and
`g.ok` becomes False.

## Command console

```python
from syslabs.console import Console

console = Console()
console.add_cmd("hello", lambda argv: True, "                | Do nothing")
console.add_param("count", 3, "An example option")
console.interpret_cmd("option count 7")
console.get_param("count")   # 7
console.run_console("commands.txt")
```

Built-in commands are `help`, `option`, `quit`, `source`, `log`, `time`
and `#`. The `error` option stops execution once that many commands have
failed; `echo` repeats each command line with the prompt. `run_console`
reads standard input when given no file name, and returns True when no
errors were recorded. `parse_args` and `get_int` are available on their
own.

## Bit puzzles

```python
from syslabs.bits import float_i2f, how_many_bits

hex(float_i2f(1))     # '0x3f800000'
how_many_bits(-5)     # 4
```

Integer puzzles work on 32-bit two's-complement values (`to_int32`,
`to_uint32`); float puzzles (`float_twice`, `float_i2f`, `float_f2i`)
take and return unsigned 32-bit patterns. `syslabs.reference` has a
`ref_`-prefixed version of every puzzle, plus `u2f` and `f2u` to convert
between patterns and floats.

## Cache simulator

```
syslabs-csim -s S -E E -b B -t TRACEFILE
```

Simulates a cache with `2**S` sets of `E` lines each over a trace of
`L`, `S` and `M` accesses, prints the outcome of each access and the hit,
miss and eviction counts, and writes the counts to `.csim_results`.

From Python:

```python
from syslabs.cachesim import Cache

stats = Cache(s=4, lines=1, b=4).run(open("trace.txt"))
print(stats.hits, stats.misses, stats.evictions)
```

## Matrix transposes

`syslabs.transpose` holds the blocked transposes; `transpose_submit`
chooses a strategy from the matrix shape (square, or 67 rows of 61), and
`is_transpose` checks a result. `syslabs.cachelab` provides
`init_matrix`, `rand_matrix`, `correct_trans`, `print_summary` and a
`TransRegistry` that `register_functions` fills.

## What is not included

- There is no string queue and no interactive queue-testing command; the
  allocator and console are provided as building blocks only.
- There is no command that runs the puzzles in `syslabs.bits` against
  `syslabs.reference`; compare them yourself, for example in tests.
- There is no driver that traces the transposes' memory accesses and
  feeds them to the simulator.