import sys


def warn(msg):
    print(f"[WARN] {msg}", file=sys.stderr)
