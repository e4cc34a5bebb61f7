import sys
import argparse
import json
import importlib.util
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from string import ascii_uppercase
from typing import Callable, Generic, List, Optional, Sequence, Tuple, TypeVar
from pathlib import Path

__version__ = "0.1.0"

# Size of the A/B group that encodes one letter
GROUP_SIZE = 5
# Decoded in place of any group that is not in the table
UNKNOWN = " "

DEFAULT_CODEC = "v1"
DEFAULT_METHOD = "plain"

# Verbose mode (disabled by default, enabled with --verbose)
VERBOSE = False

def log_info(msg: str):
    """Print info message only if verbose mode is enabled."""
    if VERBOSE:
        print(f"[INFO] {msg}", file=sys.stderr)

def log_warn(msg: str):
    """Print warning message only if verbose mode is enabled."""
    if VERBOSE:
        print(f"[WARN] {msg}", file=sys.stderr)

# ==========================================
#  ERRORS
# ==========================================

class BaconError(ValueError):
    """A general error occurred."""


class CodecError(BaconError):
    """An error coming from a codec occurred."""


class SteganographerError(BaconError):
    """An error coming from a steganographer occurred."""

# ==========================================
#  FRAMEWORK: Abstract Base Classes & Registries
# ==========================================

T = TypeVar("T")


class BaconCodec(ABC, Generic[T]):
    """
    Encodes letters to groups of two substitution elements, and back.

    The elements `a` and `b` can be characters, booleans or anything else
    that compares by equality. With `a='A'` and `b='B'` the secret
    "My secret" encodes to ABABBBABBABAAABAABAAAAABABAAAAAABAABAABA.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """The command-line name for this codec."""
        pass

    @property
    @abstractmethod
    def description(self) -> str:
        """Short description for help text."""
        pass

    def encode(self, content: Sequence[str]) -> List[T]:
        """Encode every letter of `content`. Anything else is dropped."""
        encoded = []
        for elem in content:
            encoded.extend(self.encode_elem(elem))
        return encoded

    @abstractmethod
    def encode_elem(self, elem: str) -> List[T]:
        pass

    def decode(self, encoded: Sequence[T]) -> List[str]:
        """
        Decode consecutive groups of `encoded_group_size()` elements.

        Groups that are not in the table, including an incomplete final
        group, decode to UNKNOWN.
        """
        encoded = list(encoded)
        size = self.encoded_group_size()
        remainder = len(encoded) % size
        if remainder:
            log_info(f"Incomplete final group of {remainder} element(s) decoded as unknown.")
        return [self.decode_elems(encoded[i:i + size]) for i in range(0, len(encoded), size)]

    @abstractmethod
    def decode_elems(self, elems: Sequence[T]) -> str:
        pass

    @abstractmethod
    def a(self) -> T:
        pass

    @abstractmethod
    def b(self) -> T:
        pass

    @abstractmethod
    def encoded_group_size(self) -> int:
        pass

    def is_a(self, elem: T) -> bool:
        return elem == self.a()

    def is_b(self, elem: T) -> bool:
        return elem == self.b()


class Steganographer(ABC):
    """Abstract base class that all steganographers must implement."""

    @property
    @abstractmethod
    def name(self) -> str:
        """The command-line name for this steganographer."""
        pass

    @property
    @abstractmethod
    def description(self) -> str:
        """Short description for help text."""
        pass

    @abstractmethod
    def disguise(self, secret: str, public: str, codec: BaconCodec) -> str:
        """Hide the encoded `secret` in a transformed copy of `public`."""
        pass

    @abstractmethod
    def reveal(self, text: str, codec: BaconCodec) -> str:
        """Recover the secret hidden in `text`. The result is best effort."""
        pass

    def capacity(self, public: str, codec: BaconCodec) -> int:
        """Number of secret letters that `public` can carry."""
        return count_alphabetic(public) // codec.encoded_group_size()

    @classmethod
    def from_args(cls, args: argparse.Namespace) -> "Steganographer":
        """Build an instance from parsed command-line arguments."""
        return cls()

CODEC_REGISTRY = {}
STEGANOGRAPHER_REGISTRY = {}

def register_codec(cls):
    """Decorator to auto-register codecs with their default A/B elements."""
    codec = cls()
    CODEC_REGISTRY[codec.name] = codec
    return cls

def register_steganographer(cls):
    """Decorator to register steganographers. They are built per call from their markers."""
    STEGANOGRAPHER_REGISTRY[cls.name] = cls
    return cls

def build_codec(name: str, elem_a=None, elem_b=None) -> BaconCodec:
    """Return the registered codec `name`, optionally with other A/B elements."""
    if name not in CODEC_REGISTRY:
        raise CodecError(f"Unknown codec '{name}'. Available: {', '.join(CODEC_REGISTRY)}")
    codec = CODEC_REGISTRY[name]
    if elem_a is None and elem_b is None:
        return codec
    return type(codec)(
        codec.a() if elem_a is None else elem_a,
        codec.b() if elem_b is None else elem_b,
    )

def count_alphabetic(text: Sequence[str]) -> int:
    return sum(1 for ch in text if ch.isalpha())

def substitute(public: Sequence[str], encoded: Sequence, codec: BaconCodec,
               mark_a: Callable[[str], str], mark_b: Callable[[str], str]) -> str:
    """
    Walk `public` and transform each alphabetic character with `mark_a` or
    `mark_b`, following the next element of `encoded`.

    Non-alphabetic characters pass through and consume nothing. Once
    `encoded` is exhausted the rest of `public` is copied unchanged.
    """
    disguised = []
    i = 0
    for pc in public:
        if pc.isalpha() and i < len(encoded):
            if codec.is_a(encoded[i]):
                disguised.append(mark_a(pc))
                i += 1
            elif codec.is_b(encoded[i]):
                disguised.append(mark_b(pc))
                i += 1
            else:
                disguised.append(pc)
        else:
            disguised.append(pc)
    return "".join(disguised)

# ==========================================
#  CODECS: Bacon's substitution tables
# ==========================================

class TableCodec(BaconCodec[T]):
    """
    Codec driven by a letter -> pattern table.

    Patterns are spelled with 'a' and 'b' and resolved against the
    configured elements, so one table serves any element type.
    """

    TABLE = {}

    def __init__(self, elem_a: T = "A", elem_b: T = "B"):
        self.elem_a = elem_a
        self.elem_b = elem_b
        # A pattern shared by two letters decodes to the first of them
        self._letters = {}
        for letter, pattern in self.TABLE.items():
            self._letters.setdefault(pattern, letter)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.elem_a!r}, {self.elem_b!r})"

    def encode_elem(self, elem: str) -> List[T]:
        pattern = self.TABLE.get(elem.upper())
        if pattern is None:
            return []
        return [self.elem_a if p == "a" else self.elem_b for p in pattern]

    def decode_elems(self, elems: Sequence[T]) -> str:
        if len(elems) != self.encoded_group_size():
            return UNKNOWN
        pattern = []
        for elem in elems:
            if self.is_a(elem):
                pattern.append("a")
            elif self.is_b(elem):
                pattern.append("b")
            else:
                return UNKNOWN
        return self._letters.get("".join(pattern), UNKNOWN)

    def a(self) -> T:
        return self.elem_a

    def b(self) -> T:
        return self.elem_b

    def encoded_group_size(self) -> int:
        return GROUP_SIZE


@register_codec
class CharCodec(TableCodec):
    """
    First version of Bacon's cipher.

    I/J and U/V share a group, so they decode to I and U.
    """

    name = "v1"
    description = "Original 24-group Bacon alphabet (I=J, U=V)."

    TABLE = dict(zip(ascii_uppercase, (
        "aaaaa aaaab aaaba aaabb aabaa aabab aabba aabbb abaaa abaaa abaab ababa ababb "
        "abbaa abbab abbba abbbb baaaa baaab baaba baabb baabb babaa babab babba babbb"
    ).split()))


@register_codec
class CharCodecV2(TableCodec):
    """Second version of Bacon's cipher: every letter has its own group."""

    name = "v2"
    description = "26-group Bacon alphabet, one group per letter."

    TABLE = {
        letter: format(i, "05b").replace("0", "a").replace("1", "b")
        for i, letter in enumerate(ascii_uppercase)
    }

# ==========================================
#  STEGANOGRAPHY: Letter Case
# ==========================================

@register_steganographer
class LetterCaseSteganographer(Steganographer):
    """Hides the cipher in the case of the public text: lowercase=A, uppercase=B."""

    name = "case"
    description = "Hides the secret in letter case (lowercase=A, uppercase=B)."

    def disguise(self, secret: str, public: str, codec: BaconCodec) -> str:
        illegal = sorted({c for c in secret if not c.isalpha() and c != " "})
        if illegal:
            raise SteganographerError(
                f"The secret can contain only alphabetic characters and spaces. Found {''.join(illegal)!r}")

        required = count_alphabetic(secret) * codec.encoded_group_size()
        available = count_alphabetic(public)
        if available < required:
            raise SteganographerError(
                f"The public input should have at least {required} alphabetic characters. "
                f"It was found to have {available}")

        return substitute(public, codec.encode(secret), codec, str.lower, str.upper)

    def reveal(self, text: str, codec: BaconCodec) -> str:
        encoded = [codec.b() if ch.isupper() else codec.a() for ch in text if ch.isalpha()]
        return "".join(codec.decode(encoded))

# ==========================================
#  STEGANOGRAPHY: Markers
# ==========================================

@dataclass(frozen=True)
class Marker:
    """Start/end delimiters that bracket the letters of one alphabet symbol."""

    start: Optional[str] = None
    end: Optional[str] = None

    @classmethod
    def empty(cls) -> "Marker":
        return cls()

    @property
    def start_string(self) -> str:
        return self.start or ""

    @property
    def end_string(self) -> str:
        return self.end or ""

    def is_defined(self) -> bool:
        return self.start is not None and self.end is not None

    def is_empty(self) -> bool:
        return self.start is None and self.end is None


class ElementKind(Enum):
    A = "A"
    B = "B"
    OTHER = "OTHER"


@dataclass
class ParsedElement:
    """A run of text from a disguised input and the symbol it stands for."""

    text: str
    kind: ElementKind
    # Offsets covered in the scanned text, delimiters included
    start: int = -1
    end: int = -1


class DelimiterSteganographer(Steganographer):
    """
    Base for steganographers that wrap letters in A/B delimiters.

    Disguise wraps every carrying letter as `start + letter + end` of the
    marker for its symbol, then (with `optimize_disguise`) fuses runs of
    the same symbol by removing `end + start`. One of the markers may be
    left empty: on reveal every letter outside the other marker is read as
    the empty marker's symbol.
    """

    DEFAULT_A_MARKER = Marker.empty()
    DEFAULT_B_MARKER = Marker.empty()

    def __init__(self, a_marker: Marker, b_marker: Marker, optimize_disguise: bool = True):
        self._validate(a_marker, b_marker)
        self.a_marker = a_marker
        self.b_marker = b_marker
        self.optimize_disguise = optimize_disguise

    @staticmethod
    def _validate(a_marker: Marker, b_marker: Marker):
        for label, marker in (("A", a_marker), ("B", b_marker)):
            if not marker.is_defined() and not marker.is_empty():
                raise SteganographerError(
                    f"The {label} marker must define both a start and an end, or neither: {marker}")
            if marker.start == "" or marker.end == "":
                raise SteganographerError(f"The {label} marker cannot use empty delimiters: {marker}")

        if a_marker.is_empty() and b_marker.is_empty():
            raise SteganographerError("At least one of the A and B markers must be defined")

        if a_marker.is_defined() and b_marker.is_defined():
            for a_delim in (a_marker.start, a_marker.end):
                for b_delim in (b_marker.start, b_marker.end):
                    if a_delim in b_delim or b_delim in a_delim:
                        raise SteganographerError(f"Cannot create a marker with {a_marker} and {b_marker}")

    @classmethod
    def from_args(cls, args: argparse.Namespace) -> "DelimiterSteganographer":
        delimiters = (args.a_start, args.a_end, args.b_start, args.b_end)
        if any(d is not None for d in delimiters):
            a_marker = Marker(args.a_start, args.a_end)
            b_marker = Marker(args.b_start, args.b_end)
        else:
            a_marker, b_marker = cls.DEFAULT_A_MARKER, cls.DEFAULT_B_MARKER
        return cls(a_marker, b_marker, optimize_disguise=not args.no_optimize)

    @property
    def undefined_kind(self) -> Optional[ElementKind]:
        """The symbol of the empty marker, if one of them is empty."""
        if self.a_marker.is_empty():
            return ElementKind.A
        if self.b_marker.is_empty():
            return ElementKind.B
        return None

    def disguise(self, secret: str, public: str, codec: BaconCodec) -> str:
        encoded = codec.encode(secret)
        available = count_alphabetic(public)
        if available < len(encoded):
            log_warn(f"Public text carries only {available} of {len(encoded)} encoded elements. "
                     f"The secret is truncated.")

        a, b = self.a_marker, self.b_marker
        disguised = substitute(
            public, encoded, codec,
            lambda ch: a.start_string + ch + a.end_string,
            lambda ch: b.start_string + ch + b.end_string,
        )

        if self.optimize_disguise:
            for marker in (a, b):
                if marker.is_defined():
                    disguised = disguised.replace(marker.end + marker.start, "")
        return disguised

    def reveal(self, text: str, codec: BaconCodec) -> str:
        return "".join(codec.decode(self.to_encoded(self.parse(text), codec)))

    @abstractmethod
    def parse(self, text: str) -> List[ParsedElement]:
        pass

    @staticmethod
    def to_encoded(elements: Sequence[ParsedElement], codec: BaconCodec) -> list:
        """One codec element per alphabetic character of the A and B elements."""
        encoded = []
        for element in elements:
            if element.kind is ElementKind.A:
                symbol = codec.a()
            elif element.kind is ElementKind.B:
                symbol = codec.b()
            else:
                continue
            encoded.extend(symbol for ch in element.text if ch.isalpha())
        return encoded


@register_steganographer
class MarkdownSteganographer(DelimiterSteganographer):
    """
    Hides the cipher in plain-text markers, markdown style.

    With only the B marker set to `*`, "My secret" hidden in "This is a
    public message ..." reads "T*h*i*s* *is* a *pu*b*l*ic m*e*ss*a*ge ...".
    """

    name = "markdown"
    description = "Wraps letters in text markers, e.g. *b* for B (A or B may be left unmarked)."

    DEFAULT_B_MARKER = Marker("*", "*")

    def parse(self, text: str) -> List[ParsedElement]:
        """
        Split `text` into the elements bracketed by the markers.

        The scan always moves past a non-empty start delimiter, so it ends.
        When one marker is empty, the characters between elements are
        spliced in as elements of that marker's symbol.
        """
        elements = []
        pos = 0
        while True:
            found = self._next_start(text, pos)
            if found is None:
                break
            start_index, kind, marker = found

            content_start = start_index + len(marker.start)
            end_index = text.find(marker.end, content_start)
            if end_index == -1:
                if content_start >= len(text):
                    break
                log_warn(f"Unterminated {kind.value} marker at offset {start_index}; "
                         f"reading to the end of the text.")
                content_end = next_pos = len(text)
            else:
                content_end = end_index
                next_pos = end_index + len(marker.end)

            elements.append(ParsedElement(text[content_start:content_end], kind, start_index, next_pos))
            pos = next_pos

        undefined = self.undefined_kind
        if undefined is not None:
            elements = self._splice_unmarked(text, elements, undefined)
        return elements

    def _next_start(self, text: str, pos: int) -> Optional[Tuple[int, ElementKind, Marker]]:
        """Nearest start delimiter at or after `pos`. None when missing or tied."""
        candidates = []
        for kind, marker in ((ElementKind.A, self.a_marker), (ElementKind.B, self.b_marker)):
            if marker.start is not None:
                index = text.find(marker.start, pos)
                if index != -1:
                    candidates.append((index, kind, marker))

        if not candidates:
            return None
        if len(candidates) == 2 and candidates[0][0] == candidates[1][0]:
            return None
        return min(candidates, key=lambda candidate: candidate[0])

    @staticmethod
    def _splice_unmarked(text: str, elements: List[ParsedElement], kind: ElementKind) -> List[ParsedElement]:
        spliced = []
        cursor = 0
        for element in elements:
            spliced.extend(ParsedElement(ch, kind, i, i + 1)
                           for i, ch in enumerate(text[cursor:element.start], cursor))
            spliced.append(element)
            cursor = element.end
        spliced.extend(ParsedElement(ch, kind, i, i + 1) for i, ch in enumerate(text[cursor:], cursor))
        return spliced

# ==========================================
#  STEGANOGRAPHY: Watermark Engine
# ==========================================

class WatermarkEngine:
    """
    Injects and retrieves an invisible header naming how a text was encoded.

    Protocol:
    - S (Start/Stop Sentinel): \u2060 (Word Joiner)
    - 0 (Bit Zero): \u200B (Zero Width Space)
    - 1 (Bit One):  \u200C (Zero Width Non-Joiner)

    Format: [S] [Binary UTF-8 of "<method>/<codec>"] [S] [Text]

    None of these characters is alphabetic, so carriers ignore them.
    """

    SENTINEL = '\u2060'
    ZERO = '\u200B'
    ONE = '\u200C'

    @classmethod
    def inject(cls, text: str, method: str, codec_name: str) -> str:
        """Prefixes text with an invisible watermark of the method and codec names."""
        bits = "".join(f"{b:08b}" for b in f"{method}/{codec_name}".encode("utf-8"))
        invisible_payload = bits.replace('0', cls.ZERO).replace('1', cls.ONE)
        return f"{cls.SENTINEL}{invisible_payload}{cls.SENTINEL}{text}"

    @classmethod
    def detect(cls, text: str) -> Tuple[Optional[str], Optional[str], str]:
        """
        Scans for the invisible watermark.
        Returns: (method, codec_name, text_without_watermark)
        """
        if not text.startswith(cls.SENTINEL):
            return None, None, text

        end_index = text.find(cls.SENTINEL, 1)
        if end_index == -1:
            return None, None, text

        raw_payload = text[1:end_index]
        if not raw_payload or len(raw_payload) % 8 or any(c not in (cls.ZERO, cls.ONE) for c in raw_payload):
            return None, None, text

        bits = raw_payload.replace(cls.ZERO, '0').replace(cls.ONE, '1')
        try:
            label = bytes(int(bits[i:i + 8], 2) for i in range(0, len(bits), 8)).decode("utf-8")
        except UnicodeDecodeError:
            return None, None, text

        method, sep, codec_name = label.partition("/")
        if not sep:
            return None, None, text
        return method, codec_name, text[end_index + 1:]

# ==========================================
#  PLUGIN SYSTEM: Dynamic Steganographer Loading
# ==========================================

PLUGIN_API = {
    "Steganographer": Steganographer,
    "DelimiterSteganographer": DelimiterSteganographer,
    "Marker": Marker,
    "ParsedElement": ParsedElement,
    "ElementKind": ElementKind,
    "SteganographerError": SteganographerError,
    "register_steganographer": register_steganographer,
    "log_info": log_info,
    "log_warn": log_warn,
}

def load_plugins(plugin_dir: str = None) -> List[str]:
    """
    Load steganographer plugins from a directory with manifest.json.

    Args:
        plugin_dir: Path to plugins directory (default: ./plugins relative to this module)

    Returns:
        List of successfully loaded steganographer names
    """
    if plugin_dir is None:
        plugin_dir = Path(__file__).parent / "plugins"
    else:
        plugin_dir = Path(plugin_dir)

    if not plugin_dir.exists():
        return []

    manifest_path = plugin_dir / "manifest.json"
    if not manifest_path.exists():
        log_warn(f"No manifest.json in {plugin_dir}. Skipping plugin loading.")
        return []

    try:
        with open(manifest_path, "r", encoding="utf-8") as f:
            manifest = json.load(f)
    except (json.JSONDecodeError, OSError) as e:
        log_warn(f"Failed to read manifest.json: {e}")
        return []

    loaded = []
    for entry in manifest.get("plugins", []):
        filename = entry.get("file")
        expected = entry.get("steganographer")

        if not filename:
            continue

        filepath = plugin_dir / filename
        if not filepath.exists():
            log_warn(f"Plugin file not found: {filepath}")
            continue

        try:
            spec = importlib.util.spec_from_file_location(filepath.stem, filepath)
            if spec and spec.loader:
                module = importlib.util.module_from_spec(spec)
                # Make our framework available to plugins
                for attr, value in PLUGIN_API.items():
                    setattr(module, attr, value)
                spec.loader.exec_module(module)

                if expected and expected in STEGANOGRAPHER_REGISTRY:
                    loaded.append(expected)
                elif expected:
                    log_warn(f"Plugin {filename} did not register steganographer '{expected}'")
                else:
                    loaded.append(filename)
        except Exception as e:
            log_warn(f"Failed to load plugin {filename}: {e}")

    return loaded

# ==========================================
#  CLI LOGIC
# ==========================================

def list_methods():
    """Print all available codecs and steganographers."""
    print("\nAvailable Codecs:")
    print("=" * 60)
    for name, codec in CODEC_REGISTRY.items():
        print(f"  {name:<12} {codec.description}")
    print("\nAvailable Methods:")
    print("=" * 60)
    print(f"  {DEFAULT_METHOD:<12} Prints the A/B cipher text itself.")
    for name, cls in STEGANOGRAPHER_REGISTRY.items():
        print(f"  {name:<12} {cls.description}")
    print("=" * 60)
    print(f"\nTotal: {len(CODEC_REGISTRY)} codec(s), {len(STEGANOGRAPHER_REGISTRY)} steganographer(s) registered.")


def build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Bacon's cipher with letter-case, marker and tag steganography",
        formatter_class=argparse.RawTextHelpFormatter
    )

    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")

    methods = [DEFAULT_METHOD] + list(STEGANOGRAPHER_REGISTRY.keys())
    method_help = "\n".join(f"  {k:<12}: {v.description}" for k, v in STEGANOGRAPHER_REGISTRY.items())
    parser.add_argument("-m", "--method", choices=methods, default=DEFAULT_METHOD,
                        help=f"Hiding method (default: {DEFAULT_METHOD}). Auto-detected on decode.\n{method_help}")
    parser.add_argument("-c", "--codec", choices=list(CODEC_REGISTRY.keys()), default=DEFAULT_CODEC,
                        help=f"Bacon alphabet version (default: {DEFAULT_CODEC}). Auto-detected on decode.")
    parser.add_argument("--symbols", nargs=2, default=["A", "B"], metavar=("A", "B"),
                        help="Single-character substitution symbols for the plain method (default: A B)")

    action_group = parser.add_mutually_exclusive_group(required=True)
    action_group.add_argument("-e", "--encode", action="store_true", help="Encode mode")
    action_group.add_argument("-d", "--decode", action="store_true", help="Decode mode")
    action_group.add_argument("-l", "--list", action="store_true", help="List all available codecs and methods")

    # Marker options
    parser.add_argument("--a-start", metavar="STR", help="Start delimiter of the A marker")
    parser.add_argument("--a-end", metavar="STR", help="End delimiter of the A marker")
    parser.add_argument("--b-start", metavar="STR", help="Start delimiter of the B marker")
    parser.add_argument("--b-end", metavar="STR", help="End delimiter of the B marker")
    parser.add_argument("--no-optimize", action="store_true",
                        help="Keep one marker pair per letter instead of fusing runs")

    # Carrier text
    public_group = parser.add_mutually_exclusive_group()
    public_group.add_argument("-p", "--public", help="Public text that carries the secret")
    public_group.add_argument("--public-file", metavar="PATH", help="File with the public text")

    parser.add_argument("--no-watermark", action="store_true",
                        help="Do not prefix the output with the invisible method watermark")
    parser.add_argument("--plugin-dir", type=str, metavar="PATH",
                        help="Custom plugin directory (must contain manifest.json)")
    parser.add_argument("-v", "--verbose", action="store_true",
                        help="Enable verbose output (info and warning messages)")

    # I/O options
    io_group = parser.add_mutually_exclusive_group()
    io_group.add_argument("-t", "--text", help="Direct text input")
    io_group.add_argument("-i", "--input", help="Input file path")

    parser.add_argument("-o", "--output", help="Output file path")

    return parser


def _read_file(path: str) -> str:
    try:
        with open(path, "r", encoding="utf-8") as f:
            return f.read()
    except FileNotFoundError:
        sys.exit(f"Error: File '{path}' not found.")


def main(argv: Optional[List[str]] = None):
    global VERBOSE

    if argv is None:
        argv = sys.argv[1:]

    # Preliminary scan for --verbose (needed before plugin loading)
    VERBOSE = "--verbose" in argv or "-v" in argv

    # Load plugins before parsing args (so they appear in --list and -m choices)
    plugin_dir = None
    for i, arg in enumerate(argv):
        if arg == "--plugin-dir" and i + 1 < len(argv):
            plugin_dir = argv[i + 1]
            break
        elif arg.startswith("--plugin-dir="):
            plugin_dir = arg.split("=", 1)[1]
            break

    loaded_plugins = load_plugins(plugin_dir)
    if loaded_plugins:
        log_info(f"Loaded plugins: {', '.join(loaded_plugins)}")

    parser = build_arg_parser()
    args = parser.parse_args(argv)

    if args.list:
        list_methods()
        sys.exit(0)

    if any(len(symbol) != 1 for symbol in args.symbols) or args.symbols[0] == args.symbols[1]:
        parser.error("--symbols takes two different single characters")

    # 1. READ INPUT
    if args.text is not None:
        source_text = args.text
    elif args.input:
        source_text = _read_file(args.input)
    elif not sys.stdin.isatty():
        source_text = sys.stdin.read()
    else:
        print("[BACON] Paste input below. Ctrl+D (Unix) or Ctrl+Z (Win) to end:")
        try:
            source_text = sys.stdin.read()
        except KeyboardInterrupt:
            sys.exit(0)

    # 2. ENCODE OR DECODE
    if args.encode:
        method = args.method
        secret = source_text.rstrip("\r\n")
        try:
            codec = build_codec(args.codec, *args.symbols)
            if method == DEFAULT_METHOD:
                body = "".join(str(symbol) for symbol in codec.encode(secret))
            else:
                if args.public is not None:
                    public_text = args.public
                elif args.public_file:
                    public_text = _read_file(args.public_file)
                else:
                    sys.exit(f"Error: Method '{method}' needs a public text (--public or --public-file).")
                steganographer = STEGANOGRAPHER_REGISTRY[method].from_args(args)
                log_info(f"Public text can carry {steganographer.capacity(public_text, codec)} letter(s).")
                body = steganographer.disguise(secret, public_text, codec)
        except BaconError as e:
            sys.exit(f"Encode Error: {e}")

        result = body if args.no_watermark else WatermarkEngine.inject(body, method, args.codec)

    else:
        # Decode Mode: Attempt Auto-Detection
        detected_method, detected_codec, clean_text = WatermarkEngine.detect(source_text)

        method = args.method
        if detected_method == DEFAULT_METHOD or detected_method in STEGANOGRAPHER_REGISTRY:
            if method != DEFAULT_METHOD and method != detected_method:
                log_warn(f"User specified '{method}' but invisible watermark says '{detected_method}'. "
                         f"Using detected method.")
            method = detected_method
        elif detected_method:
            log_warn(f"Watermark names unknown method '{detected_method}'. Using '{method}'.")

        codec_name = args.codec
        if detected_codec in CODEC_REGISTRY:
            codec_name = detected_codec

        try:
            codec = build_codec(codec_name, *args.symbols)
            if method == DEFAULT_METHOD:
                encoded = [ch for ch in clean_text if codec.is_a(ch) or codec.is_b(ch)]
                result = "".join(codec.decode(encoded))
            else:
                steganographer = STEGANOGRAPHER_REGISTRY[method].from_args(args)
                result = steganographer.reveal(clean_text, codec)
        except BaconError as e:
            sys.exit(f"Decode Error ({method}): {e}")
        result = result.rstrip()

    # 3. WRITE OUTPUT
    if args.output:
        try:
            with open(args.output, "w", encoding="utf-8") as f:
                f.write(result)
                if args.decode: f.write("\n")
        except OSError as e:
            sys.exit(f"Error writing output: {e}")
    else:
        print(result)

if __name__ == "__main__":
    main()
