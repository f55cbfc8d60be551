"""Wavelet (W) and quantization (Q) subband trees for WSQ images."""

from __future__ import annotations

from dataclasses import dataclass

W_TREE_LEN = 20
Q_TREE_LEN = 64

_INV_ROW_NODES = frozenset({2, 4, 7, 9, 11, 13, 16, 18})
_INV_COL_NODES = frozenset({3, 5, 8, 9, 12, 13, 17, 18})


@dataclass
class WTreeNode:
    """Location, size and spectral inversion flags of one wavelet split."""

    x: int = 0
    y: int = 0
    lenx: int = 0
    leny: int = 0
    inv_rw: bool = False
    inv_cl: bool = False


@dataclass
class QTreeNode:
    """Location and size of one quantized subband."""

    x: int = 0
    y: int = 0
    lenx: int = 0
    leny: int = 0


def _half_up(n: int) -> int:
    return (n + 1) // 2 if n % 2 else n // 2


def _w_tree4(
    w_tree: list[WTreeNode],
    start1: int,
    start2: int,
    lenx: int,
    leny: int,
    x: int,
    y: int,
    stop1: bool,
) -> None:
    """Record a region and its four-way split into the wavelet tree."""
    p1, p2 = start1, start2
    parent, a, b, c = w_tree[p1], w_tree[p2], w_tree[p2 + 1], w_tree[p2 + 2]

    parent.x, parent.y, parent.lenx, parent.leny = x, y, lenx, leny

    a.x = x
    c.x = x
    a.y = y
    b.y = y

    if lenx % 2 == 0:
        a.lenx = lenx // 2
        b.lenx = a.lenx
    elif p1 == 4:
        a.lenx = (lenx - 1) // 2
        b.lenx = a.lenx + 1
    else:
        a.lenx = (lenx + 1) // 2
        b.lenx = a.lenx - 1
    b.x = a.lenx + x
    if not stop1:
        w_tree[p2 + 3].lenx = b.lenx
        w_tree[p2 + 3].x = b.x
    c.lenx = a.lenx

    if leny % 2 == 0:
        a.leny = leny // 2
        c.leny = a.leny
    elif p1 == 5:
        a.leny = (leny - 1) // 2
        c.leny = a.leny + 1
    else:
        a.leny = (leny + 1) // 2
        c.leny = a.leny - 1
    c.y = a.leny + y
    if not stop1:
        w_tree[p2 + 3].leny = c.leny
        w_tree[p2 + 3].y = c.y
    b.leny = a.leny


def build_w_tree(width: int, height: int) -> list[WTreeNode]:
    """Build the 20-node wavelet decomposition tree for an image."""
    w_tree = [
        WTreeNode(inv_rw=node in _INV_ROW_NODES, inv_cl=node in _INV_COL_NODES)
        for node in range(W_TREE_LEN)
    ]

    _w_tree4(w_tree, 0, 1, width, height, 0, 0, True)

    if w_tree[1].lenx % 2 == 0:
        lenx = w_tree[1].lenx // 2
        lenx2 = lenx
    else:
        lenx = (w_tree[1].lenx + 1) // 2
        lenx2 = lenx - 1

    if w_tree[1].leny % 2 == 0:
        leny = w_tree[1].leny // 2
        leny2 = leny
    else:
        leny = (w_tree[1].leny + 1) // 2
        leny2 = leny - 1

    _w_tree4(w_tree, 4, 6, lenx2, leny, lenx, 0, False)
    _w_tree4(w_tree, 5, 10, lenx, leny2, 0, leny, False)
    _w_tree4(w_tree, 14, 15, lenx, leny, 0, 0, False)

    last = w_tree[19]
    last.x = 0
    last.y = 0
    last.lenx = _half_up(w_tree[15].lenx)
    last.leny = _half_up(w_tree[15].leny)
    return w_tree


def _q_tree16(
    q_tree: list[QTreeNode],
    p: int,
    lenx: int,
    leny: int,
    x: int,
    y: int,
    rw: bool,
    cl: bool,
) -> None:
    """Split a region into a 4x4 window of subbands starting at node p."""
    if lenx % 2 == 0:
        tempx = temp2x = lenx // 2
    elif cl:
        temp2x = (lenx + 1) // 2
        tempx = temp2x - 1
    else:
        tempx = (lenx + 1) // 2
        temp2x = tempx - 1

    if leny % 2 == 0:
        tempy = temp2y = leny // 2
    elif rw:
        temp2y = (leny + 1) // 2
        tempy = temp2y - 1
    else:
        tempy = (leny + 1) // 2
        temp2y = tempy - 1

    q = [q_tree[p + i] for i in range(16)]

    q[0].x = x
    q[2].x = x
    q[0].y = y
    q[1].y = y
    if tempx % 2 == 0:
        q[0].lenx = tempx // 2
        q[1].lenx = q[0].lenx
        q[2].lenx = q[0].lenx
        q[3].lenx = q[0].lenx
    else:
        q[0].lenx = (tempx + 1) // 2
        q[1].lenx = q[0].lenx - 1
        q[2].lenx = q[0].lenx
        q[3].lenx = q[1].lenx
    q[1].x = x + q[0].lenx
    q[3].x = q[1].x
    if tempy % 2 == 0:
        q[0].leny = tempy // 2
        q[1].leny = q[0].leny
        q[2].leny = q[0].leny
        q[3].leny = q[0].leny
    else:
        q[0].leny = (tempy + 1) // 2
        q[1].leny = q[0].leny
        q[2].leny = q[0].leny - 1
        q[3].leny = q[2].leny
    q[2].y = y + q[0].leny
    q[3].y = q[2].y

    q[4].x = x + tempx
    q[6].x = q[4].x
    q[4].y = y
    q[5].y = y
    q[6].y = q[2].y
    q[7].y = q[2].y
    q[4].leny = q[0].leny
    q[5].leny = q[0].leny
    q[6].leny = q[2].leny
    q[7].leny = q[2].leny
    if temp2x % 2 == 0:
        q[4].lenx = temp2x // 2
        q[5].lenx = q[4].lenx
        q[6].lenx = q[4].lenx
        q[7].lenx = q[4].lenx
    else:
        q[5].lenx = (temp2x + 1) // 2
        q[4].lenx = q[5].lenx - 1
        q[6].lenx = q[4].lenx
        q[7].lenx = q[5].lenx
    q[5].x = q[4].x + q[4].lenx
    q[7].x = q[5].x

    q[8].x = x
    q[9].x = q[1].x
    q[10].x = x
    q[11].x = q[1].x
    q[8].y = y + tempy
    q[9].y = q[8].y
    q[8].lenx = q[0].lenx
    q[9].lenx = q[1].lenx
    q[10].lenx = q[0].lenx
    q[11].lenx = q[1].lenx
    if temp2y % 2 == 0:
        q[8].leny = temp2y // 2
        q[9].leny = q[8].leny
        q[10].leny = q[8].leny
        q[11].leny = q[8].leny
    else:
        q[10].leny = (temp2y + 1) // 2
        q[11].leny = q[10].leny
        q[8].leny = q[10].leny - 1
        q[9].leny = q[8].leny
    q[10].y = q[8].y + q[8].leny
    q[11].y = q[10].y

    q[12].x = q[4].x
    q[13].x = q[5].x
    q[14].x = q[4].x
    q[15].x = q[5].x
    q[12].y = q[8].y
    q[13].y = q[8].y
    q[14].y = q[10].y
    q[15].y = q[10].y
    q[12].lenx = q[4].lenx
    q[13].lenx = q[5].lenx
    q[14].lenx = q[4].lenx
    q[15].lenx = q[5].lenx
    q[12].leny = q[8].leny
    q[13].leny = q[8].leny
    q[14].leny = q[10].leny
    q[15].leny = q[10].leny


def _q_tree4(
    q_tree: list[QTreeNode], p: int, lenx: int, leny: int, x: int, y: int
) -> None:
    """Split a region into a 2x2 window of subbands starting at node p."""
    q = [q_tree[p + i] for i in range(4)]

    q[0].x = x
    q[2].x = x
    q[0].y = y
    q[1].y = y
    if lenx % 2 == 0:
        q[0].lenx = lenx // 2
        q[1].lenx = q[0].lenx
        q[2].lenx = q[0].lenx
        q[3].lenx = q[0].lenx
    else:
        q[0].lenx = (lenx + 1) // 2
        q[1].lenx = q[0].lenx - 1
        q[2].lenx = q[0].lenx
        q[3].lenx = q[1].lenx
    q[1].x = x + q[0].lenx
    q[3].x = q[1].x
    if leny % 2 == 0:
        q[0].leny = leny // 2
        q[1].leny = q[0].leny
        q[2].leny = q[0].leny
        q[3].leny = q[0].leny
    else:
        q[0].leny = (leny + 1) // 2
        q[1].leny = q[0].leny
        q[2].leny = q[0].leny - 1
        q[3].leny = q[2].leny
    q[2].y = y + q[0].leny
    q[3].y = q[2].y


def build_q_tree(w_tree: list[WTreeNode]) -> list[QTreeNode]:
    """Build the 64-node quantization tree from a wavelet tree."""
    q_tree = [QTreeNode() for _ in range(Q_TREE_LEN)]

    def region(node: int) -> tuple[int, int, int, int]:
        w = w_tree[node]
        return w.lenx, w.leny, w.x, w.y

    _q_tree16(q_tree, 3, *region(14), False, False)
    _q_tree16(q_tree, 19, *region(4), False, True)
    _q_tree16(q_tree, 48, *region(0), False, False)
    _q_tree16(q_tree, 35, *region(5), True, False)
    _q_tree4(q_tree, 0, *region(19))
    return q_tree


def build_wsq_trees(
    width: int, height: int
) -> tuple[list[WTreeNode], list[QTreeNode]]:
    """Build both the wavelet and the quantization tree for an image."""
    w_tree = build_w_tree(width, height)
    return w_tree, build_q_tree(w_tree)