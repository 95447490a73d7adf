# resrecorder

`resrecorder` watches one running process and samples its resource use at a
fixed interval. Each watched resource is kept as its own time series. The time
axis and the value axis of a series both widen as samples arrive.

## Installing

```
pip install .
```

To run the tests:

```
pip install .[test]
pytest
```

## Command line

```
resrecorder --help
```

Run without `--pid` and it lists the running processes whose name and
executable path can be read, one per line as `PID<TAB>name<TAB>path`, sorted
by name.

With `--pid` it records that process:

- `--resource` is one of `cpu`, `mem`, `handle`, `thread`, `io`, `nonpaged`. It may be given more than once, and at least one is required.
- `--rate` is the sampling interval (default 10).
- `--unit` is `second` or `minute` (default `minute`).
- `--name` is the name used in the series titles.
- `--samples` stops after that many samples. Without it, recording goes on until Ctrl-C.

```
resrecorder --pid 1234 --resource cpu --resource mem --rate 5 --unit second --samples 3
```

The first sample is taken one second after start, and then one at each interval.
Each sample prints one line, such as `12:00:01 cpu=3.25 mem=41.70`.

The command exits with status 1 and a message in the following cases:

- no PID was given;
- no resource was chosen;
- the process ends while it is being recorded.

Values are measured as follows:

- `cpu` is the percentage of one processor's time, averaged over all processors, since the last sample. The first sample reads 0. If the rate cannot be measured, the sample reads -1.
- `mem` is the resident set size in MB.
- `handle` is the open handle count where the platform has handles, and the open file descriptor count elsewhere.

## Library use

- `resrecorder.config`
  - `RecorderConfig` holds the settings: `pid`, `name`, `resources`, `sample_rate`, `sample_unit` and `save`. Its `interval_ms()` method gives the sampling interval in milliseconds.
  - `ResourceType` is a flag set of the resources to watch.
  - `SampleUnit` is `SECOND` or `MINUTE`.
  - `list_processes()` returns `ProcessEntry` rows.
  - `sort_processes()` sorts rows by name (ignoring case) or by PID.
  - `ProcessTable` keeps the rows sorted. `click_column()` sorts by a new column, or reverses the order if it is the current column. `sort_icon` names the header icon for the current order.
- `resrecorder.process_stats.ProcessResourceStatistics` reads the figures for one PID.
  - Its methods are `is_running()`, `cpu()`, `memory_mb()`, `handle_count()` and `thread_count()`.
  - Every figure is 0 once the process is gone.
  - It is a context manager.
- `resrecorder.recorder.Recorder` runs a recording.
  - `start()` checks the config and creates one `ChartSeries` per chosen resource.
  - `sample()` adds one value to each series and returns the values.
  - `stop()` ends the recording.
  - `Recorder` raises `RecorderError` when it cannot start or go on. The error's `tip` is the message to show.
  - `layout_grid()` places charts two to a row.
- `resrecorder.chart.ChartSeries` is a series of `(datetime, value)` points.
  - `points()` returns them.
  - `tick_increment()` gives the unit and spacing of the time axis.
- `resrecorder.cpu_usage` has two CPU-rate calculators, `CpuUsage` and `ProcessCpuRate`. Both take their clock and their time sources as arguments, so they can be driven by test data.
- `resrecorder.tips`
  - `Tip` is a message and the buttons that answer it.
  - `format_tips()` lays a message out in short lines.
- `resrecorder.gif_blocks` walks the block structure of GIF87a/GIF89a data, with `iter_blocks()`, `block_type()`, `block_length()` and `read_screen_descriptor()`.
- `resrecorder.gif` splits GIF data into frames.
  - `parse_gif(data)` and `load_gif(path)` return a `GifImage`. They raise `GifFormatError` if the data is not a GIF or holds no frame.
  - `GifImage` reports `frame_count()` (0 for a still picture) and `is_animated()`.
  - `playback()` yields `(GifFrame, seconds)` pairs, and repeats an animation without end.
  - Each `GifFrame` holds a standalone single-frame GIF together with its delay, disposal method, size and offset.

## What it does not do

- There is no graphical window. Series are kept in memory, and the command prints values as text.
- Nothing is saved to disk. `RecorderConfig.save` is stored but not acted on.
- In the recorder, `thread`, `io` and `nonpaged` produce generated placeholder figures, not measurements. `ProcessResourceStatistics.thread_count()` does read the real thread count, but `Recorder` does not use it.
- GIF support stops at splitting the stream into frames. Pixels are not decoded or drawn.