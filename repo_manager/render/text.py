"""Text renderers for command output."""

from repo_manager.listing import ReportRow, remote_columns

OWNER_REPO_HEADER = "owner/repo"
OWNER_REPO_WIDTH = 35
REMOTE_WIDTH = 50
CONFIG_KEY_WIDTH = 20


def _pad(value: str, width: int) -> str:
    # Longer values are left as-is, never truncated
    return f"{value:<{width}}"


def render_repo_table(rows: list[ReportRow]) -> str:
    """
    Render repositories and their remotes as a fixed-width table.

    Columns: owner/repo, then one column per remote name (sorted). A
    repository without a given remote gets a blank, padded cell.

    Args:
        rows: Rows in display order

    Returns:
        Table text, every line newline-terminated
    """
    columns = remote_columns(rows)

    lines = [
        _pad(OWNER_REPO_HEADER, OWNER_REPO_WIDTH)
        + "".join(_pad(name, REMOTE_WIDTH) for name in columns)
    ]

    for row in rows:
        lines.append(
            _pad(row.owner_repo, OWNER_REPO_WIDTH)
            + "".join(_pad(row.remote_url_by_name.get(name, ""), REMOTE_WIDTH) for name in columns)
        )

    return "\n".join(lines) + "\n"


def render_config(values: dict[str, str]) -> str:
    """
    Render resolved configuration, keys right-aligned.

    Args:
        values: Key -> value, in display order

    Returns:
        One "KEY: value" line per entry
    """
    return "".join(f"{key:>{CONFIG_KEY_WIDTH}}: {value}\n" for key, value in values.items())
