"""Main application entry point for voicetotext."""

import sys
import time
import argparse
import logging
from pathlib import Path
from typing import Optional

from rich.console import Console

from voicetotext.errors import VoiceToTextError
from voicetotext.models.session import SessionMode, SessionStatus
from voicetotext.services.session_controller import SessionController
from voicetotext.storage.history_store import HistoryStore
from voicetotext.storage.model_store import KNOWN_MODELS, ModelStore
from voicetotext.transcription.adapter import ASRAdapter
from voicetotext.transcription.publisher import SessionEventPublisher, TextPublisher
from voicetotext.transcription.whisper_engine import FasterWhisperEngine
from voicetotext.ui.console import ConsolePrinter

from .config import VoiceToTextConfig

logger = logging.getLogger(__name__)


class Server:

    def __init__(self, config_path: Optional[str], log_level: Optional[str] = None):
        # Load configuration
        self.config = VoiceToTextConfig(config_path)
        # Command line log level wins over config
        setup_logging(self.config, log_level or self.config.get('logging.level', 'INFO'))
        self.console = Console()
        self.controller: Optional[SessionController] = None
        self.should_exit = False
        self.cleaned_up = False

    def init(self):
        logger.info("Initializing services...")

        data_dir = self.config.get_data_directory()
        self.model_store = ModelStore(data_dir)
        self.history_store = HistoryStore(data_dir)

        engine = FasterWhisperEngine(
            device=self.config.get('transcription.device', 'auto'),
            compute_type=self.config.get('transcription.compute_type', 'default'),
            beam_size=self.config.get('transcription.beam_size', 5),
        )
        self.adapter = ASRAdapter(engine)
        self.printer = ConsolePrinter(self.console)
        self.controller = SessionController(
            self.config,
            self.adapter,
            self.model_store,
            self.history_store,
            output=TextPublisher(),
            events=SessionEventPublisher(),
        )

        model_name = self.config.get('transcription.model')
        self.console.print(f"🔧 Loading model '{model_name}'...", style="blue")
        self.controller.load_model(model_name)
        self.console.print("✅ Model ready!", style="green")

    def run(self, duration: Optional[int]):
        """Record one session.

        With `duration` the session is stopped after that many seconds;
        otherwise it runs until Ctrl+C or the silence timeout ends it.
        """
        self.controller.start()
        self.console.print("🎙  Recording... press Ctrl+C to stop", style="bold")
        started = time.time()
        try:
            while self.controller.status.is_active and not self.should_exit:
                if duration and time.time() - started >= duration:
                    break
                time.sleep(1)
                self.show_progress()
        finally:
            self.cleanup()

    def show_progress(self):
        """Print elapsed time, level and any silence countdown.

        Live sessions only show the line while counting down, so chunk text
        keeps reading as one sentence.
        """
        snapshot = self.controller.get_snapshot()
        if snapshot.status != SessionStatus.RECORDING:
            return
        if snapshot.mode == SessionMode.BATCH or snapshot.silence_countdown_seconds:
            self.printer.print_snapshot(snapshot)

    def cleanup(self):
        if self.cleaned_up or self.controller is None:
            return
        self.cleaned_up = True
        self.controller.stop()
        # A silence auto-stop may still be transcribing on its worker thread
        while self.controller.status.is_active:
            time.sleep(0.1)
        self.printer.print_stats(self.history_store.stats)
        self.printer.close()
        self.adapter.unload_model()


def list_models(config: VoiceToTextConfig) -> None:
    console = Console()
    store = ModelStore(config.get_data_directory())
    available = set(store.list_available())
    for name in sorted(set(KNOWN_MODELS) | available):
        marker = "✅" if name in available else "  "
        console.print(f"{marker} {name}")
    console.print(f"\nModels directory: {store.models_dir}", style="dim")


def setup_logging(config, level: str = "INFO") -> None:
    """Set up logging configuration from YAML config."""
    log_file_path = config.get('logging.file_path', 'data/logs/voicetotext.log')
    console_output = config.get('logging.console_output', True)

    log_dir = Path(log_file_path).parent
    log_dir.mkdir(parents=True, exist_ok=True)

    handlers = []

    # File handler - always write to file
    file_handler = logging.FileHandler(log_file_path)
    file_handler.setLevel(logging.DEBUG)
    file_handler.setFormatter(logging.Formatter(
        '%(asctime)s - %(name)s - %(levelname)s - %(threadName)s - %(funcName)s:%(lineno)d - %(message)s'
    ))
    handlers.append(file_handler)

    # Console handler - warnings only, the console belongs to the transcript
    if console_output:
        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setLevel(logging.WARNING)
        console_handler.setFormatter(logging.Formatter('%(asctime)s - %(name)s - %(levelname)s - %(message)s'))
        handlers.append(console_handler)

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.setLevel(getattr(logging, level.upper()))
    for handler in handlers:
        root_logger.addHandler(handler)

    logger.info("=" * 50)
    logger.info("voicetotext starting up")
    logger.info(f"Log file: {log_file_path}")
    logger.info(f"Log level set to: {level}")
    logger.info("=" * 50)


def apply_overrides(config: VoiceToTextConfig, args: argparse.Namespace) -> None:
    if args.mode:
        config.set('transcription.mode', args.mode)
    if args.model:
        config.set('transcription.model', args.model)
    if args.language:
        config.set('transcription.language', args.language)
    if args.translate:
        config.set('transcription.translate', True)


def main() -> None:
    """Main entry point for voicetotext."""
    parser = argparse.ArgumentParser(
        description="voicetotext - microphone dictation with Whisper",
        epilog="Records one session; Ctrl+C stops recording and transcribes."
    )

    parser.add_argument(
        "--config",
        type=str,
        help="Path to configuration YAML file (default: built-in defaults)"
    )

    parser.add_argument(
        "--mode",
        type=str,
        choices=[mode.value for mode in SessionMode],
        help="Transcribe once after recording (batch) or while speaking (live)"
    )

    parser.add_argument(
        "--model",
        type=str,
        help="Model name under <data_directory>/models (overrides config)"
    )

    parser.add_argument(
        "--language",
        type=str,
        help="Language code, or 'auto' to detect (overrides config)"
    )

    parser.add_argument(
        "--translate",
        action="store_true",
        help="Translate speech to English"
    )

    parser.add_argument(
        "--log-level",
        type=str,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Set logging level (default: from config, INFO)"
    )

    parser.add_argument(
        "--duration",
        type=int,
        help="Stop recording after this many seconds"
    )

    parser.add_argument(
        "--list-models",
        action="store_true",
        help="List known and installed models, then exit"
    )

    parser.add_argument(
        "--version",
        action="version",
        version="voicetotext v0.1.0"
    )

    args = parser.parse_args()

    try:
        server = Server(args.config, args.log_level)
    except (FileNotFoundError, ValueError) as e:
        print(f"❌ Configuration error: {e}")
        sys.exit(1)

    if args.list_models:
        list_models(server.config)
        return

    try:
        apply_overrides(server.config, args)
        server.config.validate()
        server.init()
        server.run(args.duration)
    except KeyboardInterrupt:
        server.cleanup()
        print("\n👋 Goodbye!")
    except (VoiceToTextError, ValueError) as e:
        print(f"❌ Error: {e}")
        logging.error(f"Application error: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
