import logging
import os
import sys
from typing import Optional, Tuple

import tkinter as tk
from tkinter import ttk
from tkinter import font as tkfont

from config_loader import CONFIG_FILE, TimerConfig, load_config
from countdown_engine import CountdownEngine, Phase, Snapshot
from sound_player import SoundPlayer

logger = logging.getLogger(__name__)

TICK_INTERVAL_MS = 50
MIN_FONT_SIZE = 20
HEIGHT_RATIO = 0.50
WIDTH_DIVISOR = 4.5


def format_display(current_ms: int) -> Tuple[str, bool]:
    """Return the ``[-]MM:SS`` text and whether it should be shown in red."""
    negative = current_ms < 0
    total_seconds = abs(current_ms) // 1000
    minutes, seconds = divmod(total_seconds, 60)
    sign = "-" if negative else ""
    return f"{sign}{minutes:02d}:{seconds:02d}", negative


def font_size_for(width: int, height: int) -> int:
    size_by_height = int(height * HEIGHT_RATIO)
    size_by_width = int(width / WIDTH_DIVISOR)
    return max(MIN_FONT_SIZE, min(size_by_height, size_by_width))


class CountdownGUI:
    """Single window: a large time label above Start/Pause and Reset buttons."""

    TITLE = "Negative Countdown Timer"
    DEFAULT_GEOMETRY = "600x400"
    NEGATIVE_COLOR = "red"
    BUTTON_PADDING = (10, 4)
    BUTTON_MIN_HEIGHT = 40

    def __init__(
        self,
        master: tk.Tk,
        engine: CountdownEngine,
        player: Optional[SoundPlayer] = None,
    ) -> None:
        self.master = master
        self.engine = engine
        self.player = player or SoundPlayer(beep=master.bell)
        self.master.title(self.TITLE)
        self.master.geometry(self.DEFAULT_GEOMETRY)

        self.display_var = tk.StringVar(value="00:00")
        self._after_id: Optional[str] = None
        self._font_size = MIN_FONT_SIZE

        self._setup_fonts()
        self._create_style()
        self._build_view()
        self._default_foreground = self.display_label.cget("foreground")
        self._bind_events()

        self.engine.subscribe_display(self._render)
        self.engine.subscribe_zero_crossed(self._on_zero_crossed)
        self.engine.subscribe_limit_reached(self._on_limit_reached)
        self.reset_timer()

    @property
    def font_size(self) -> int:
        return self._font_size

    def _setup_fonts(self) -> None:
        self.fonts = {
            "display": tkfont.Font(root=self.master, size=MIN_FONT_SIZE, weight="bold"),
        }

    def _create_style(self) -> None:
        self.style = ttk.Style(self.master)
        self.style.configure("Timer.TButton", padding=self.BUTTON_PADDING)

    def _build_view(self) -> None:
        self.frame = ttk.Frame(self.master, padding=8)
        self.frame.pack(expand=True, fill="both")

        self.display_label = tk.Label(
            self.frame,
            textvariable=self.display_var,
            font=self.fonts["display"],
            anchor="center",
        )
        self.display_label.pack(expand=True, fill="both")

        self.buttons_frame = ttk.Frame(self.frame)
        self.buttons_frame.pack(fill="x", pady=(8, 0))
        self.buttons_frame.rowconfigure(0, minsize=self.BUTTON_MIN_HEIGHT)
        for col in range(2):
            self.buttons_frame.columnconfigure(col, weight=1, uniform="buttons")

        self.start_pause_button = ttk.Button(
            self.buttons_frame,
            text="Start",
            style="Timer.TButton",
            command=self.start_or_pause,
        )
        self.start_pause_button.grid(row=0, column=0, padx=4, sticky="nsew")

        self.reset_button = ttk.Button(
            self.buttons_frame,
            text="Reset",
            style="Timer.TButton",
            command=self.reset_timer,
        )
        self.reset_button.grid(row=0, column=1, padx=4, sticky="nsew")

    def _bind_events(self) -> None:
        self.master.bind("<Configure>", self._on_configure)
        self.master.bind("<Alt-Return>", self.toggle_fullscreen)
        self.master.bind("<Alt-KP_Enter>", self.toggle_fullscreen)
        self.master.protocol("WM_DELETE_WINDOW", self._quit_app)

    # -- engine events -------------------------------------------------

    def _render(self, snapshot: Snapshot) -> None:
        text, negative = format_display(snapshot.current_ms)
        self.display_var.set(text)
        color = self.NEGATIVE_COLOR if negative else self._default_foreground
        self.display_label.configure(foreground=color)

    def _on_zero_crossed(self) -> None:
        self.player.play(self.engine.config.sound_zero_path)

    def _on_limit_reached(self) -> None:
        self._cancel_tick()
        self.start_pause_button.grid_remove()
        self.player.play(self.engine.config.sound_limit_path)

    # -- user intents --------------------------------------------------

    def start_or_pause(self) -> None:
        phase = self.engine.start_or_pause()
        if phase is Phase.RUNNING:
            self.start_pause_button.configure(text="Pause")
            self._schedule_tick()
        else:
            self._cancel_tick()
            self.start_pause_button.configure(text="Start")

    def reset_timer(self) -> None:
        self._cancel_tick()
        self.player.stop()
        self.engine.reset()
        self.start_pause_button.configure(text="Start")
        self.start_pause_button.grid()
        self.master.after_idle(self._refresh_font)

    def toggle_fullscreen(self, _event: Optional[tk.Event] = None) -> str:
        fullscreen = self.master.getboolean(self.master.attributes("-fullscreen"))
        self.master.attributes("-fullscreen", not fullscreen)
        logger.debug("Fullscreen %s", "off" if fullscreen else "on")
        return "break"

    # -- tick loop -----------------------------------------------------

    def _schedule_tick(self) -> None:
        self._cancel_tick()
        self._after_id = self.master.after(TICK_INTERVAL_MS, self._on_tick)

    def _cancel_tick(self) -> None:
        if self._after_id is not None:
            self.master.after_cancel(self._after_id)
            self._after_id = None

    def _on_tick(self) -> None:
        self._after_id = None
        self.engine.tick()
        if self.engine.is_running:
            self._schedule_tick()

    # -- sizing --------------------------------------------------------

    def _on_configure(self, event: tk.Event) -> None:
        if event.widget is self.master:
            self._update_font_size(event.width, event.height)

    def _refresh_font(self) -> None:
        self._update_font_size(self.master.winfo_width(), self.master.winfo_height())

    def _update_font_size(self, width: int, height: int) -> None:
        size = font_size_for(width, height)
        if size != self._font_size:
            self._font_size = size
            self.fonts["display"].configure(size=size)

    def _quit_app(self) -> None:
        self._cancel_tick()
        self.player.close()
        self.master.destroy()

    def run(self) -> None:
        self.master.mainloop()


def main() -> int:
    level_name = os.environ.get("TIMER_LOG_LEVEL", "WARNING")
    logging.basicConfig(
        level=getattr(logging, level_name.upper(), logging.WARNING),
        format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
    )
    config: TimerConfig = load_config(CONFIG_FILE)
    logger.info("Starting with %s", config)
    root = tk.Tk()
    engine = CountdownEngine(config)
    gui = CountdownGUI(root, engine)
    gui.run()
    return 0


if __name__ == "__main__":
    sys.exit(main())
