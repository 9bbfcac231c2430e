#!/usr/bin/env python3
"""
wav_cat.py

WAV chunk explorer built on the table-driven decoder in wav_spec.

Modes:
- Default (summary): RIFF header, fmt fields, LIST/INFO text, data length and
  the other chunks found
- --layout: offset, tag and declared size of every chunk, in file order
- --survey: count chunk IDs across scanned files and output a summary CSV
- --has: only report files that include any of the given chunk IDs (comma-separated)
- --peaks N: strongest FFT bins of the (downsampled) data chunk, with note names
- --plot DIR: write waveform and spectrum PNGs per file
- -o/--output: write one CSV row per decoded field (or the survey table)
- -v/--verbose: also print every decoded field (ignored if -q)

Examples:
  python wav_cat.py "D:\\Audio\\Loops" -n 200
  python wav_cat.py tone.wav --layout
  python wav_cat.py "D:\\Audio\\Loops" --survey -o survey.csv
  python wav_cat.py "D:\\Audio\\Loops" --has LIST -v
  python wav_cat.py 440hz.wav --peaks 5 --plot plots
"""

import argparse
import binascii
import os
import re
import sys
from collections import Counter

import pandas as pd

from wav_spec import (
    FieldType,
    RiffError,
    fourcc_to_string,
    iter_chunks,
    parse_wav_file,
)
from wav_plot import plot_spectrum, plot_waveform
from wav_spectrum import DEFAULT_DOWNSAMPLE_STEP, DEFAULT_TOP_PEAKS, analyze

DEFAULT_MAX_FILES = 500
HEX_PREVIEW_BYTES = 16
FIELD_COLUMNS = ["filename", "key", "kind", "value"]
SURVEY_COLUMNS = ["chunk_id", "files_with_chunk"]
KNOWN_PREFIXES = ("header", "fmt", "data", "list")


# --------------------------
# Rendering helpers
# --------------------------
def format_value(parsed):
    """Human-readable rendering of a ParsedValue."""
    kind, value = parsed
    if kind is FieldType.FOURCC:
        return fourcc_to_string(value)
    if kind is FieldType.TEXT:
        return value.decode("utf-8", errors="replace").rstrip("\x00").strip()
    if kind is FieldType.BYTES:
        preview = binascii.hexlify(value[:HEX_PREVIEW_BYTES]).decode()
        if len(value) > HEX_PREVIEW_BYTES:
            preview += "..."
        return preview
    if kind is FieldType.SAMPLES:
        return f"{len(value)} samples"
    return value


def chunk_tags(fields):
    """Tags of every chunk after the RIFF header, in first-seen order."""
    tags = []
    for prefix in fields.prefixes():
        tag = fields.value(f"{prefix}.chunk_id")
        if tag is None:
            continue
        name = fourcc_to_string(tag)
        if name not in tags:
            tags.append(name)
    return tags


def list_entries(fields, prefix="list"):
    """(tag, text) pairs of a decoded LIST chunk."""
    entries = []
    i = 0
    while f"{prefix}.entries.{i}.tag_id" in fields:
        tag = fourcc_to_string(fields.value(f"{prefix}.entries.{i}.tag_id"))
        text = format_value(fields[f"{prefix}.entries.{i}.text"])
        entries.append((tag, text))
        i += 1
    return entries


def duration_sec(fields):
    """
    data bytes / (sample_rate * channels * bytes per sample), or None when
    the fmt chunk is missing or degenerate.
    """
    sample_rate = fields.value("fmt.sample_rate")
    channels = fields.value("fmt.num_channels")
    bits = fields.value("fmt.bits_per_sample")
    data_bytes = fields.value("data.chunk_size")
    if not (sample_rate and channels and bits) or data_bytes is None:
        return None
    bytes_per_frame = channels * max(bits // 8, 1)
    return round(data_bytes / float(bytes_per_frame) / float(sample_rate), 4)


def field_rows(filepath, fields):
    return [
        {"filename": filepath, "key": key, "kind": parsed.kind.value, "value": format_value(parsed)}
        for key, parsed in fields.items()
    ]


def safe_basename_for_csv(path_basename):
    """
    Preserve directory portion; slugify only the basename.
    Ensures parent directories exist and .csv suffix is present.
    """
    path_norm = os.path.normpath(path_basename)
    dirpart, base = os.path.split(path_norm)
    base_slug = re.sub(r"[^A-Za-z0-9._-]+", "_", base.strip()) or "output.csv"
    if not base_slug.lower().endswith(".csv"):
        base_slug += ".csv"
    if dirpart:
        os.makedirs(dirpart, exist_ok=True)
        return os.path.join(dirpart, base_slug)
    return base_slug


def iter_wav_paths(paths, limit):
    """Files as given, directories walked for *.wav, at most limit paths."""
    count = 0
    for path in paths:
        if os.path.isdir(path):
            candidates = []
            for root, _, files in os.walk(path):
                for file in sorted(files):
                    if file.lower().endswith(".wav"):
                        candidates.append(os.path.join(root, file))
        else:
            candidates = [path]
        for candidate in candidates:
            if count >= limit:
                return
            yield candidate
            count += 1


# --------------------------
# Per-file output
# --------------------------
def print_summary(filepath, fields):
    print(f"\n=== {os.path.basename(filepath)} ===")
    print(
        f"   RIFF size: {fields.value('header.riff_size')} | "
        f"Type: {fourcc_to_string(fields.value('header.wave_id'))}"
    )

    if "fmt.chunk_id" in fields:
        print(
            f"   Format: {fields.value('fmt.audio_format')} | "
            f"Channels: {fields.value('fmt.num_channels')} | "
            f"Sample Rate: {fields.value('fmt.sample_rate')} | "
            f"Bits: {fields.value('fmt.bits_per_sample')}"
        )
        print(
            f"   Byte Rate: {fields.value('fmt.byte_rate')} | "
            f"Block Align: {fields.value('fmt.block_align')}"
        )
        extra = fields.value("fmt.extra_bytes", b"")
        if extra:
            print(f"   Format extension: {len(extra)} bytes")
    else:
        print("   No fmt chunk found.")

    if "list.chunk_id" in fields:
        entries = list_entries(fields)
        print(f"   LIST {fourcc_to_string(fields.value('list.list_type'))}: {len(entries)} entries")
        for tag, text in entries:
            print(f"     {tag}: {text}")

    if "data.chunk_id" in fields:
        print(
            f"   Data: {len(fields.value('data.samples'))} samples | "
            f"Duration: {duration_sec(fields)} sec"
        )
    else:
        print("   No data chunk found.")

    others = [
        f"{prefix} ({fourcc_to_string(fields.value(prefix + '.chunk_id'))})"
        for prefix in fields.prefixes()
        if prefix not in KNOWN_PREFIXES
    ]
    if others:
        print("   Other chunks:", ", ".join(others))


def print_fields(fields):
    for key, parsed in fields.items():
        print(f"  {key} = {format_value(parsed)}")


def print_layout(filepath, decode_list=True):
    """Print the chunk layout as it is walked. Raises on the first bad chunk."""
    print(f"\n=== {os.path.basename(filepath)} ===")
    with open(filepath, "rb") as f:
        for chunk in iter_chunks(f, decode_list=decode_list):
            tag = fourcc_to_string(chunk.tag)
            print(f"Chunk {tag:4s} @ {chunk.offset}, size={chunk.size} ({chunk.prefix})")


def report_spectrum(filepath, fields, args):
    name = os.path.basename(filepath)
    bits = fields.value("fmt.bits_per_sample")
    if bits not in (None, 16) and not args.quiet:
        print(f"   [WARN] {name}: {bits}-bit audio analysed as 16-bit samples")
    try:
        analysis = analyze(fields, step=args.step, count=args.peaks or DEFAULT_TOP_PEAKS)
    except ValueError as e:
        if not args.quiet:
            print(f"   [WARN] {name}: no spectrum ({e})")
        return

    if args.peaks and not args.quiet:
        print(f"   Top {args.peaks} frequencies (at {analysis['sample_rate']:.1f} Hz):")
        for hz, mag, note in analysis["peaks"]:
            print(f"     {hz:.2f} Hz ({note or '-'}) | Magnitude: {mag:.4f}")

    if args.plot:
        os.makedirs(args.plot, exist_ok=True)
        stem = os.path.splitext(os.path.basename(filepath))[0]
        waveform_png = os.path.join(args.plot, f"{stem}_waveform.png")
        spectrum_png = os.path.join(args.plot, f"{stem}_spectrum.png")
        plot_waveform(analysis["samples"], waveform_png)
        plot_spectrum(analysis["frequencies"], analysis["magnitudes"], analysis["peaks"], spectrum_png)
        if not args.quiet:
            print(f"   [INFO] Wrote {waveform_png} and {spectrum_png}")


# --------------------------
# Main
# --------------------------
def build_parser():
    parser = argparse.ArgumentParser(description="WAV chunk explorer (table-driven RIFF decoder).")
    parser.add_argument("paths", nargs="+", help="WAV files or directories containing WAV files.")
    parser.add_argument("-o", "--output", help="Output CSV filename (fields, or survey table with --survey).")
    parser.add_argument("-n", "--num", type=int, default=DEFAULT_MAX_FILES, help="Number of WAV files to scan.")
    parser.add_argument("-q", "--quiet", action="store_true", help="Suppress per-file console output.")
    parser.add_argument("-v", "--verbose", action="store_true", help="Echo every decoded field (ignored if -q).")
    parser.add_argument("--layout", action="store_true", help="Print chunk offsets and sizes instead of a summary.")
    parser.add_argument("--survey", action="store_true", help="Count chunk IDs across scanned files.")
    parser.add_argument("--has", help="Only include files that contain any of these chunk IDs (comma-separated, e.g. 'LIST,bext').")
    parser.add_argument("--raw-list", action="store_true", help="Keep LIST chunks as raw payloads instead of decoding INFO entries.")
    parser.add_argument("--peaks", type=int, default=0, help="Print the N strongest spectrum peaks.")
    parser.add_argument("--plot", help="Directory for waveform and spectrum PNGs.")
    parser.add_argument("--step", type=int, default=DEFAULT_DOWNSAMPLE_STEP, help="Downsample step before the FFT.")
    return parser


def main(argv=None):
    args = build_parser().parse_args(argv)
    decode_list = not args.raw_list

    wanted = None
    if args.has:
        wanted = set([w.strip().upper() for w in args.has.split(",") if w.strip()])

    # LAYOUT MODE
    if args.layout:
        failures = 0
        for filepath in iter_wav_paths(args.paths, args.num):
            try:
                print_layout(filepath, decode_list)
            except (RiffError, OSError) as e:
                print(f"[ERR] {filepath}: {e}")
                failures += 1
        return 1 if failures else 0

    rows = []
    counts = Counter()
    files_scanned = 0
    failures = 0

    for filepath in iter_wav_paths(args.paths, args.num):
        try:
            fields = parse_wav_file(filepath, decode_list=decode_list)
        except (RiffError, OSError) as e:
            print(f"[ERR] {filepath}: {e}")
            failures += 1
            continue

        tags = chunk_tags(fields)
        if wanted and not ({t.upper() for t in tags} & wanted):
            continue
        files_scanned += 1

        # SURVEY MODE
        if args.survey:
            counts.update(tags)
            continue

        if not args.quiet:
            print_summary(filepath, fields)
            if args.verbose:
                print_fields(fields)

        if args.peaks or args.plot:
            report_spectrum(filepath, fields, args)

        rows.extend(field_rows(filepath, fields))

    if args.survey:
        print("\n== Chunk ID Survey ==")
        for cid, c in counts.most_common():
            print(f"{cid:6s} : {c} files")
        print(f"\n[INFO] Scanned {files_scanned} file(s). Found {len(counts)} unique chunk ID(s).")
        if args.output:
            survey_csv = safe_basename_for_csv(args.output)
            pd.DataFrame(counts.most_common(), columns=SURVEY_COLUMNS).to_csv(survey_csv, index=False)
            print(f"[INFO] Wrote survey to {survey_csv}")
    else:
        print(f"\n[INFO] Parsed {files_scanned} file(s), {failures} failed.")
        if args.output:
            output_csv = safe_basename_for_csv(args.output)
            pd.DataFrame(rows, columns=FIELD_COLUMNS).to_csv(output_csv, index=False)
            print(f"[INFO] Wrote {len(rows)} field rows to {output_csv}")

    return 1 if failures else 0


if __name__ == "__main__":
    sys.exit(main())
