import os


VERSION = (0, 1, 0)
VERSION_STR = f"{VERSION[0]}.{VERSION[1]}.{VERSION[2]}{'-' +  str(VERSION[-1]) if len(VERSION) > 3 else ''}"


ARGV0 = "flagkit"
DESCRIPTION = "A small typed command-line flag parser"
GLOBAL_DIR = os.path.join(os.path.expanduser("~"), ".flagkit")
GLOBAL_LOG_FILE: str = os.path.join(GLOBAL_DIR, "flagkit.log")
