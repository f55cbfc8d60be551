"""Two-channel wavelet analysis and synthesis used by WSQ compression.

Rows (or columns) of a region are split into a lowpass and a highpass
half with symmetric boundary extension.  The reconstruction filters the
halves back into the original samples.  The sequence of sample positions
touched by each filter tap depends only on the signal length and the
filter sizes, so it is planned once and applied to all rows at once.
"""

from __future__ import annotations

from collections.abc import Sequence
from functools import lru_cache

import numpy as np

from wsqcodec.tree import WTreeNode


def _split(len2: int) -> tuple[int, int]:
    """Lengths of the lowpass and highpass halves of a signal."""
    if len2 % 2:
        llen = (len2 + 1) // 2
        return llen, llen - 1
    return len2 // 2, len2 // 2


def _prepare_filters(hifilt, lofilt) -> tuple[np.ndarray, np.ndarray]:
    hi = np.asarray(hifilt, dtype=np.float32).ravel()
    lo = np.asarray(lofilt, dtype=np.float32).ravel()
    if hi.size == 0:
        raise ValueError("highpass filter coefficients not defined")
    if lo.size == 0:
        raise ValueError("lowpass filter coefficients not defined")
    return hi, lo


def _freeze(rows: list[list[int]], width: int) -> np.ndarray:
    arr = np.array(rows, dtype=np.intp).reshape(-1, width)
    arr.setflags(write=False)
    return arr


@lru_cache(maxsize=None)
def _analysis_plan(len2: int, lsz: int, hsz: int) -> tuple[np.ndarray, np.ndarray]:
    """Sample positions read by every lowpass and highpass output."""
    da_ev = len2 % 2
    if lsz % 2:
        loc = (lsz - 1) // 2
        hoc = (hsz - 1) // 2 - 1
        olle = ohle = olre = ohre = False
    else:
        loc = lsz // 2 - 2
        hoc = hsz // 2 - 2
        olle = ohle = olre = ohre = True
        if loc == -1:
            loc = 0
            olle = False
        if hoc == -1:
            hoc = 0
            ohle = False

    _, hlen = _split(len2)
    p0, p1 = 0, len2 - 1

    def walk(px: int, pxstr: int, le: bool, re: bool, size: int) -> list[int]:
        positions = [px]
        for _ in range(1, size):
            if px == p0:
                if le:
                    pxstr = 0
                    le = False
                else:
                    pxstr = 1
            if px == p1:
                if re:
                    pxstr = 0
                    re = False
                else:
                    pxstr = -1
            px += pxstr
            positions.append(px)
        return positions

    lo_rows: list[list[int]] = []
    hi_rows: list[list[int]] = []
    lspx, lspxstr, lle2, lre2 = loc, -1, olle, olre
    hspx, hspxstr, hle2, hre2 = hoc, -1, ohle, ohre
    for _ in range(hlen):
        lo_rows.append(walk(lspx, lspxstr, lle2, lre2, lsz))
        hi_rows.append(walk(hspx, hspxstr, hle2, hre2, hsz))
        for _ in range(2):
            if lspx == p0:
                if lle2:
                    lspxstr = 0
                    lle2 = False
                else:
                    lspxstr = 1
            lspx += lspxstr
            if hspx == p0:
                if hle2:
                    hspxstr = 0
                    hle2 = False
                else:
                    hspxstr = 1
            hspx += hspxstr
    if da_ev:
        lo_rows.append(walk(lspx, lspxstr, lle2, lre2, lsz))

    for row in lo_rows + hi_rows:
        if any(pos < 0 or pos >= len2 for pos in row):
            raise ValueError(
                f"signal of length {len2} is too short for filters of "
                f"sizes {lsz} and {hsz}"
            )
    return _freeze(lo_rows, lsz), _freeze(hi_rows, hsz)


@lru_cache(maxsize=None)
def _synthesis_plan(len2: int, lsz: int, hsz: int) -> tuple[tuple, ...]:
    """Ordered output operations that rebuild a signal from its halves.

    Each operation is ``("zero", pos, ())``, ``("set", pos, taps)`` with
    taps ``(lowpass index, coefficient index)``, or ``("add", pos, taps)``
    with taps ``(highpass index, coefficient index, factor)``.
    """
    da_ev = len2 % 2
    llen, hlen = _split(len2)

    if lsz % 2:
        asym = False
        ssfac = 1.0
        ofhre = 0
        loc = (lsz - 1) // 4
        hoc = (hsz + 1) // 4 - 1
        lotap = ((lsz - 1) // 2) % 2
        hotap = ((hsz + 1) // 2) % 2
        if da_ev:
            olle, olre, ohle, ohre = False, False, True, True
        else:
            olle, olre, ohle, ohre = False, True, True, False
    else:
        asym = True
        ssfac = -1.0
        ofhre = 2
        loc = lsz // 4 - 1
        hoc = hsz // 4 - 1
        lotap = (lsz // 2) % 2
        hotap = (hsz // 2) % 2
        if da_ev:
            olle, olre, ohle, ohre = True, False, True, True
        else:
            olle, olre, ohle, ohre = True, True, True, True
        if loc == -1:
            loc = 0
            olle = False
        if hoc == -1:
            hoc = 0
            ohle = False

    lp0, lp1 = 0, llen - 1
    hp0, hp1 = 0, hlen - 1

    def lo_walk(px: int, pxstr: int, le: bool, re: bool, tap: int) -> tuple:
        taps = [(px, tap)]
        for i in range(tap + 2, lsz, 2):
            if px == lp0:
                if le:
                    pxstr = 0
                    le = False
                else:
                    pxstr = 1
            if px == lp1:
                if re:
                    pxstr = 0
                    re = False
                else:
                    pxstr = -1
            px += pxstr
            taps.append((px, i))
        return tuple(taps)

    def hi_walk(
        px: int, pxstr: int, le: bool, re: bool, tap: int, sfac: float, fhre: int
    ) -> tuple[tuple, int]:
        taps = []
        for i in range(tap, hsz, 2):
            if px == hp0:
                if le:
                    pxstr = 0
                    le = False
                else:
                    pxstr = 1
                    sfac = 1.0
            if px == hp1:
                if re:
                    pxstr = 0
                    re = False
                    if asym and da_ev:
                        re = True
                        fhre -= 1
                        sfac = float(fhre)
                        if sfac == 0.0:
                            re = False
                else:
                    pxstr = -1
                    if asym:
                        sfac = -1.0
            taps.append((px, i, sfac))
            px += pxstr
        return tuple(taps), fhre

    ops: list[tuple] = [("zero", pos, ()) for pos in (0, 1) if pos < len2]
    limg = himg = 0
    lspx, lspxstr, lstap, lle2, lre2 = loc, -1, lotap, olle, olre
    hspx, hspxstr, hstap, hle2, hre2 = hoc, -1, hotap, ohle, ohre
    osfac = ssfac
    fhre = 0

    for _ in range(hlen):
        for tap in range(lstap, -1, -1):
            ops.append(("set", limg, lo_walk(lspx, lspxstr, lle2, lre2, tap)))
            limg += 1
        if lspx == lp0:
            if lle2:
                lspxstr = 0
                lle2 = False
            else:
                lspxstr = 1
        lspx += lspxstr
        lstap = 1

        for tap in range(hstap, -1, -1):
            taps, fhre = hi_walk(hspx, hspxstr, hle2, hre2, tap, osfac, ofhre)
            ops.append(("add", himg, taps))
            himg += 1
        if hspx == hp0:
            if hle2:
                hspxstr = 0
                hle2 = False
            else:
                hspxstr = 1
                osfac = 1.0
        hspx += hspxstr
        hstap = 1

    if da_ev:
        lstap = 1 if lotap else 0
    else:
        lstap = 2 if lotap else 1
    for tap in range(1, lstap - 1, -1):
        ops.append(("set", limg, lo_walk(lspx, lspxstr, lle2, lre2, tap)))
        limg += 1

    if da_ev:
        hstap = 1 if hotap else 0
        if hsz == 2:
            hspx -= hspxstr
            fhre = 1
    else:
        hstap = 2 if hotap else 1
    for tap in range(1, hstap - 1, -1):
        start_fhre = fhre if hsz == 2 else ofhre
        taps, fhre = hi_walk(hspx, hspxstr, hle2, hre2, tap, osfac, start_fhre)
        ops.append(("add", himg, taps))
        himg += 1

    for kind, pos, taps in ops:
        limit = llen if kind == "set" else hlen
        bad_pos = pos < 0 or pos >= len2
        bad_tap = any(t[0] < 0 or t[0] >= limit for t in taps)
        if bad_pos or bad_tap:
            raise ValueError(
                f"signal of length {len2} is too short for filters of "
                f"sizes {lsz} and {hsz}"
            )
    return tuple(ops)


def _region_index(
    base: int, len1: int, len2: int, pitch: int, stride: int, size: int
) -> np.ndarray:
    idx = (
        base
        + np.arange(len1, dtype=np.intp)[:, None] * pitch
        + np.arange(len2, dtype=np.intp)[None, :] * stride
    )
    if idx.size and (idx.min() < 0 or idx.max() >= size):
        raise ValueError("region lies outside the sample buffer")
    return idx


def _filter(samples: np.ndarray, positions: np.ndarray, coef: np.ndarray) -> np.ndarray:
    if positions.shape[0] == 0:
        return np.zeros((samples.shape[0], 0), dtype=np.float32)
    acc = samples[:, positions[:, 0]] * coef[0]
    for i in range(1, coef.size):
        acc = acc + samples[:, positions[:, i]] * coef[i]
    return acc


def _get_lets(
    new: np.ndarray,
    new_base: int,
    old: np.ndarray,
    old_base: int,
    len1: int,
    len2: int,
    pitch: int,
    stride: int,
    hi: np.ndarray,
    lo: np.ndarray,
    inv: bool,
) -> None:
    if len1 <= 0 or len2 <= 0:
        return
    lo_pos, hi_pos = _analysis_plan(len2, lo.size, hi.size)
    if lo.size % 2 == 0:
        hi = -hi
    src = _region_index(old_base, len1, len2, pitch, stride, old.size)
    dst = _region_index(new_base, len1, len2, pitch, stride, new.size)
    samples = old[src]
    lo_out = _filter(samples, lo_pos, lo)
    hi_out = _filter(samples, hi_pos, hi)
    halves = (hi_out, lo_out) if inv else (lo_out, hi_out)
    new[dst] = np.concatenate(halves, axis=1)


def _join_lets(
    new: np.ndarray,
    new_base: int,
    old: np.ndarray,
    old_base: int,
    len1: int,
    len2: int,
    pitch: int,
    stride: int,
    hi: np.ndarray,
    lo: np.ndarray,
    inv: bool,
) -> None:
    if len1 <= 0 or len2 <= 0:
        return
    ops = _synthesis_plan(len2, lo.size, hi.size)
    if lo.size % 2 == 0:
        hi = -hi
    llen, hlen = _split(len2)
    lo_base, hi_base = (hlen, 0) if inv else (0, llen)
    src = _region_index(old_base, len1, len2, pitch, stride, old.size)
    dst = _region_index(new_base, len1, len2, pitch, stride, new.size)
    samples = old[src]
    out = new[dst].copy()
    for kind, pos, taps in ops:
        if kind == "zero":
            out[:, pos] = 0.0
        elif kind == "set":
            k0, i0 = taps[0]
            acc = samples[:, lo_base + k0] * lo[i0]
            for k, i in taps[1:]:
                acc = acc + samples[:, lo_base + k] * lo[i]
            out[:, pos] = acc
        else:
            acc = out[:, pos]
            for k, i, sfac in taps:
                acc = acc + samples[:, hi_base + k] * hi[i] * np.float32(sfac)
            out[:, pos] = acc
    new[dst] = out


def _as_samples(old) -> np.ndarray:
    return np.asarray(old, dtype=np.float32).ravel()


def get_lets(old, len1, len2, pitch, stride, hifilt, lofilt, inv) -> np.ndarray:
    """Split ``len1`` signals of ``len2`` samples into low and high halves.

    Signal ``r`` sample ``k`` is read at ``r * pitch + k * stride`` of the
    flattened ``old``.  The result has the size of ``old``; each signal's
    lowpass half followed by its highpass half (or the reverse when
    ``inv`` is set) is stored at the same positions, everything else is
    zero.
    """
    samples = _as_samples(old)
    hi, lo = _prepare_filters(hifilt, lofilt)
    new = np.zeros_like(samples)
    _get_lets(new, 0, samples, 0, len1, len2, pitch, stride, hi, lo, bool(inv))
    return new


def join_lets(old, len1, len2, pitch, stride, hifilt, lofilt, inv) -> np.ndarray:
    """Rebuild ``len1`` signals from the halves laid out by :func:`get_lets`."""
    samples = _as_samples(old)
    hi, lo = _prepare_filters(hifilt, lofilt)
    new = np.zeros_like(samples)
    _join_lets(new, 0, samples, 0, len1, len2, pitch, stride, hi, lo, bool(inv))
    return new


def _image_buffer(fdata, width: int, height: int) -> np.ndarray:
    if width <= 0 or height <= 0:
        raise ValueError("image dimensions must be positive")
    data = np.array(fdata, dtype=np.float32).ravel()
    if data.size != width * height:
        raise ValueError("pixel count does not match the image dimensions")
    return data


def wsq_decompose(
    fdata, width: int, height: int, w_tree: Sequence[WTreeNode], hifilt, lofilt
) -> np.ndarray:
    """Wavelet-decompose a float image into its subbands.

    Returns a new flat float32 array; the input is left untouched.
    """
    data = _image_buffer(fdata, width, height)
    hi, lo = _prepare_filters(hifilt, lofilt)
    scratch = np.zeros_like(data)
    for node in w_tree:
        base = node.y * width + node.x
        _get_lets(scratch, 0, data, base, node.leny, node.lenx,
                  width, 1, hi, lo, node.inv_rw)
        _get_lets(data, base, scratch, 0, node.lenx, node.leny,
                  1, width, hi, lo, node.inv_cl)
    return data


def wsq_reconstruct(
    fdata, width: int, height: int, w_tree: Sequence[WTreeNode], hifilt, lofilt
) -> np.ndarray:
    """Rebuild a float image from its wavelet subbands.

    Returns a new flat float32 array; the input is left untouched.
    """
    data = _image_buffer(fdata, width, height)
    hi, lo = _prepare_filters(hifilt, lofilt)
    scratch = np.zeros_like(data)
    for node in reversed(list(w_tree)):
        base = node.y * width + node.x
        _join_lets(scratch, 0, data, base, node.lenx, node.leny,
                   1, width, hi, lo, node.inv_cl)
        _join_lets(data, base, scratch, 0, node.leny, node.lenx,
                   width, 1, hi, lo, node.inv_rw)
    return data