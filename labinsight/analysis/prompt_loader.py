from pathlib import Path

_DEFAULT_PROMPT_DIR = Path(__file__).parent / "prompts"


def load_prompt(name: str, prompt_dir: Path | None = None) -> str:
    """Load a bundled prompt template by file name.

    Raises:
        FileNotFoundError: if the template does not exist.
    """
    directory = prompt_dir if prompt_dir is not None else _DEFAULT_PROMPT_DIR
    return (directory / name).read_text(encoding="utf-8")
