from __future__ import annotations

from dotenv import load_dotenv as dotenv_load_dotenv


def load_dotenv(env_file: str | None) -> None:
    """Load environment variables from a dotenv file if one is given.

    Variables already set in the environment win over the file.
    """

    if not env_file:
        return

    dotenv_load_dotenv(env_file, override=False)
