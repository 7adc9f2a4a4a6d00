import os
import json
from pathlib import Path

# Search
ORIGIN_SEED = 0
STRATEGY = "poll"        # "poll" (idle frames) or "trap" (breakpoint at TRAP_ADDRESS)
IDLE_THRESHOLD = 3       # equal comparisons in a row => 4 identical samples
BASELINE_MODE = "checkpoint"  # or "region" (copy of REGION_BASE..+REGION_SIZE)

# Savestate slots
START_SLOT = -1          # loaded once before the baseline is captured; -1 skips
BASELINE_SLOT = 11
BEST_SLOT = 10

# Memory map (console addresses, big-endian)
TRAP_ADDRESS = 0x802C4AFC
POSITION_ADDRESSES = [
    0x91B4C8BC,  # cue
    0x91B4D07C,
    0x91B4D7AC,
    0x91B4DEDC,
    0x91B4E60C,
    0x91B4ED3C,
    0x91B4F46C,
    0x91B4FB9C,
    0x91B502CC,
    0x91B509FC,
]
COUNT_ADDRESSES = [
    0x91B4C7BB,  # cue
    0x91B4CF7B,
    0x91B4D6AB,
    0x91B4DDDB,
    0x91B4E50B,
    0x91B4EC3B,
    0x91B4F36B,
    0x91B4FA9B,
    0x91B501CB,
    0x91B508FB,
]
COUNT_SIZE = 1
BYTE_ORDER = "big"
REGION_BASE = 0x91B4BF80
REGION_SIZE = 0x6600

# Reference table (units: ball radius 2.8785, y up, table bed at y=0)
BALL_RADIUS = 2.8785
BALL_MASS = 0.17
TABLE_HALF_LENGTH = 127.93
TABLE_HALF_WIDTH = 63.97
CUSHION_HEIGHT = 4.0
CUSHION_THICKNESS = 5.0
POCKET_RADIUS = 7.2
TRAY_Y = -100.0
GRAVITY_Y = -981.0
BREAK_SPEED = 1100.0
BALL_RESTITUTION = 0.95
CUSHION_RESTITUTION = 0.8
BALL_FRICTION = 0.2
LINEAR_DAMPING = 0.35
ANGULAR_DAMPING = 0.35
SLEEP_SPEED = 0.75       # balls slower than this are put to rest

DT = 1/240  # physics timestep
SUBSTEPS = 4             # physics steps per host frame (60 Hz frames)
MAX_FRAMES = 0           # 0 => run until stopped
SLEEP_TIME = 0.0

CHECKPOINT_DIR = ""
TRACE_OUT = "artifacts/traces/search.jsonl"



def _coerce(name, old, s):
    t = type(old)
    if t is bool:
        return s.strip().lower() in ("1","true","yes","on")
    if t is int:
        try:
            return int(float(s)) if "x" not in s.lower() else int(s, 0)
        except Exception:
            return old
    if t is float:
        try:
            return float(s)
        except Exception:
            return old
    if t is list:
        try:
            return [int(v, 0) for v in s.strip().strip("[]").replace(",", " ").split()]
        except Exception:
            return old
    try:
        if s.strip().lower() in ("none","null"):
            return None
    except Exception:
        pass
    return s

for _k,_v in list(globals().items()):
    if isinstance(_k, str) and _k.isupper():
        _ev = os.getenv(_k)
        if _ev is not None:
            globals()[_k] = _coerce(_k, _v, _ev)

_rp = os.getenv("RACK_CONFIG_PATH")
if _rp:
    try:
        _d = json.loads(Path(_rp).read_text(encoding="utf-8"))
        if isinstance(_d, dict):
            for _k,_v in _d.items():
                if isinstance(_k, str) and _k.isupper():
                    globals()[_k] = _v
    except Exception as e:
        print("[WARN] constants: could not read RACK_CONFIG_PATH", _rp, repr(e), flush=True)
