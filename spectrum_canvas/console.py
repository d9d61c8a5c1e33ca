"""
Console output for Spectrum Canvas

Modules import `print` from here so every status line respects the
--silent and --debug flags set at startup.
"""

import builtins

_ORIG_PRINT = builtins.print
_GLOBAL_SILENT = False
_GLOBAL_DEBUG = False


def set_print_flags(silent, debug):
    global _GLOBAL_SILENT, _GLOBAL_DEBUG
    _GLOBAL_SILENT = bool(silent)
    _GLOBAL_DEBUG = bool(debug)


def print(*args, debug_only=False, force=False, **kwargs):
    """Module-local print wrapper.

    - If `force=True`, always prints (bypasses silent).
    - If `debug_only=True`, prints only when debug output is enabled.
    - Otherwise prints unless silent.
    """
    if _GLOBAL_SILENT and not force:
        return
    if debug_only and not _GLOBAL_DEBUG:
        return
    return _ORIG_PRINT(*args, **kwargs)
