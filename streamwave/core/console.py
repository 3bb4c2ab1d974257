"""Terminal output for codec runs: per-file markers, batch progress, summaries."""

from contextlib import contextmanager
from typing import Callable, Iterator, Optional

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.progress import BarColumn, MofNCompleteColumn, Progress, TextColumn
from rich.theme import Theme

from ..constants import FAIL_MSG, INDENT_LEVEL_1, INDENT_LEVEL_2, SUCCESS_MSG
from .models import AudioFormat, BatchSummary, FileOperation

streamwave_theme = Theme({
    "path": "cyan",
    "format.sfx": "magenta",
    "format.vo": "blue",
    "format.none": "dim",
    "marker.done": "bold green",
    "marker.failed": "bold red",
    "reason": "red",
    "summary.ok": "bold green",
    "summary.errors": "yellow",
})

OUTPUT_MODES = ("standard", "verbose", "silent")

# Called after each batch item with (operation, position, total)
ProgressCallback = Callable[[FileOperation, int, int], None]


class CodecConsole:
    """Writes codec results to a rich console according to the output mode."""

    def __init__(self, console: Optional[Console] = None):
        self.console = console or Console(theme=streamwave_theme, highlight=False)
        self.output_mode = "standard"

    @property
    def quiet(self) -> bool:
        return self.output_mode == "silent"

    def configure(self, output_mode: str = "standard", debug: bool = False):
        mode = output_mode.lower()
        if mode not in OUTPUT_MODES:
            raise ValueError(f"Unknown output mode {output_mode!r}; expected one of {', '.join(OUTPUT_MODES)}")
        self.output_mode = "verbose" if debug else mode

    def transformed(self, verb: str, source, output, fmt: AudioFormat):
        """One line for a finished single-file encode or decode."""
        if self.quiet:
            return
        style = f"format.{fmt.value.lower()}"
        self.console.print(
            f"[marker.done]{SUCCESS_MSG}[/marker.done] {verb} [path]{escape(str(source))}[/path]"
            f" -> [path]{escape(str(output))}[/path] [{style}]{fmt.value}[/{style}]"
        )

    def untouched(self, source):
        if self.quiet:
            return
        self.console.print(
            f"[format.none]{AudioFormat.NONE.value}[/format.none] [path]{escape(str(source))}[/path]"
            " has no known header, nothing to do"
        )

    def operation(self, op: FileOperation):
        """Batch line: the source path with a done!/failed! marker and the failure reason."""
        if self.quiet:
            return
        path = escape(str(op.path))
        if op.failed:
            self.console.print(f"{INDENT_LEVEL_2}[path]{path}[/path] [marker.failed]{FAIL_MSG}[/marker.failed]")
            self.console.print(f"{INDENT_LEVEL_2}{INDENT_LEVEL_1}[reason]{escape(op.error or '')}[/reason]")
        else:
            self.console.print(f"{INDENT_LEVEL_2}[path]{path}[/path] [marker.done]{SUCCESS_MSG}[/marker.done]")

    def summary(self, summary: BatchSummary):
        if self.quiet:
            return
        if summary.failed:
            self.console.print(
                f"[summary.errors]Finished with errors: {summary.failed} of {summary.total} file(s) failed.[/summary.errors]"
            )
        else:
            self.console.print(f"[summary.ok]Processed {summary.total} file(s).[/summary.ok]")

    def error_panel(self, message: str, title: str = "Error"):
        if not self.quiet:
            self.console.print(Panel(escape(message), title=title, border_style="red", expand=False))

    @contextmanager
    def batch_progress(self, description: str) -> Iterator[ProgressCallback]:
        """Yield a callback that advances an `N/M files` bar as batch items finish.

        Verbose mode prints each item as it completes instead of drawing a bar.
        """
        if self.quiet:
            yield lambda op, position, total: None
            return

        if self.output_mode == "verbose":
            def report(op: FileOperation, position: int, total: int):
                marker = FAIL_MSG if op.failed else SUCCESS_MSG
                self.console.log(f"[{position}/{total}] {escape(str(op.path))} {marker}")
            yield report
            return

        progress = Progress(
            TextColumn("[bold cyan]{task.description}"),
            BarColumn(),
            MofNCompleteColumn(),
            console=self.console,
            transient=True,
        )
        with progress:
            task = progress.add_task(description, total=None)

            def advance(op: FileOperation, position: int, total: int):
                progress.update(task, completed=position, total=total)

            yield advance


console = CodecConsole()
