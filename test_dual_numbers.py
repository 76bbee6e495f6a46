"""
Dual-number algebra: arithmetic rules, chain rule, nesting and narrowing.

Checks derivatives against analytic formulas and against finite differences
from scipy.optimize.approx_fprime.
"""

import math
import operator
import warnings

import numpy as np
import pytest
from scipy.optimize import approx_fprime

from manufactured_ad.fad import (
    DualNumber, NumberArray, raw_value, promote, truncate, nesting_order,
    independent_variables, use_config, hessian, grad, grad_hessian,
    sin, cos, tan, asin, acos, atan, atan2, sinh, cosh, tanh,
    exp, log, log10, sqrt, cbrt, hypot, erf,
    fmin, fmax, floor, absolute,
)


def test_independent_variable_accessors():
    x = DualNumber(2.0, [1.0, 0.0])
    assert x.value == 2.0
    assert isinstance(x.derivatives, NumberArray)
    assert x.derivatives == [1.0, 0.0]
    assert x.order == 1
    with pytest.raises(AttributeError):
        x.value = 3.0


def test_sum_and_product_rule():
    x = DualNumber(3.0, 1.0)
    assert (x * x).derivatives == 6.0
    assert (x + x).derivatives == 2.0
    assert (x - 2 * x).derivatives == -1.0
    assert (5.0 - x).value == 2.0
    assert (5.0 - x).derivatives == -1.0


def test_quotient_rule():
    x = DualNumber(3.0, 1.0)
    np.testing.assert_allclose((1.0 / x).derivatives, -1.0 / 9.0)
    np.testing.assert_allclose((x / (x + 1.0)).derivatives, 1.0 / 16.0)
    np.testing.assert_allclose((x / 2.0).derivatives, 0.5)


def test_gradient_through_mixed_expression():
    x, y = independent_variables([2.0, 5.0])
    f = 3.0 * x * y + x / y - 1.0
    np.testing.assert_allclose(f.value, 3.0 * 10.0 + 0.4 - 1.0)
    np.testing.assert_allclose(raw_value(f.derivatives), [3 * 5 + 1 / 5, 3 * 2 - 2 / 25])


@pytest.mark.parametrize("x0", [0.3, 0.7, 1.1, 2.0])
def test_chain_rule_matches_finite_difference(x0):
    x = DualNumber(x0, 1.0)
    g = x * x + 1.0
    f = sin(g)

    # f' = cos(g) * g'
    np.testing.assert_allclose(f.derivatives, np.cos(g.value) * g.derivatives)

    fd = approx_fprime(np.array([x0]), lambda v: np.sin(v[0] ** 2 + 1.0), 1e-7)
    np.testing.assert_allclose(f.derivatives, fd[0], rtol=1e-5, atol=1e-6)


UNARY_CASES = [
    (sin, np.sin, lambda v: np.cos(v)),
    (cos, np.cos, lambda v: -np.sin(v)),
    (tan, np.tan, lambda v: 1.0 / np.cos(v) ** 2),
    (asin, np.arcsin, lambda v: 1.0 / np.sqrt(1.0 - v * v)),
    (acos, np.arccos, lambda v: -1.0 / np.sqrt(1.0 - v * v)),
    (atan, np.arctan, lambda v: 1.0 / (1.0 + v * v)),
    (sinh, np.sinh, lambda v: np.cosh(v)),
    (cosh, np.cosh, lambda v: np.sinh(v)),
    (tanh, np.tanh, lambda v: 1.0 / np.cosh(v) ** 2),
    (exp, np.exp, lambda v: np.exp(v)),
    (log, np.log, lambda v: 1.0 / v),
    (log10, np.log10, lambda v: 1.0 / (v * np.log(10.0))),
    (sqrt, np.sqrt, lambda v: 0.5 / np.sqrt(v)),
    (cbrt, np.cbrt, lambda v: 1.0 / (3.0 * np.cbrt(v) ** 2)),
    (erf, None, lambda v: 2.0 / np.sqrt(np.pi) * np.exp(-v * v)),
]


@pytest.mark.parametrize("fn, np_fn, dfn", UNARY_CASES, ids=[c[0].__name__ for c in UNARY_CASES])
def test_elementary_function_derivatives(fn, np_fn, dfn):
    v = 0.4
    y = fn(DualNumber(v, [1.0, 2.0]))
    if np_fn is not None:
        np.testing.assert_allclose(y.value, np_fn(v))
    np.testing.assert_allclose(raw_value(y.derivatives), [dfn(v), 2.0 * dfn(v)], rtol=1e-12)


def test_functions_accept_plain_scalars():
    assert sin(0.5) == np.sin(0.5)
    assert erf(0.0) == 0.0


def test_power_rules():
    x = DualNumber(2.0, 1.0)

    # monomial exponent
    np.testing.assert_allclose((x ** 3).derivatives, 12.0)
    np.testing.assert_allclose((x ** 0.5).derivatives, 0.5 / np.sqrt(2.0))
    assert (x ** 0).value == 1.0
    assert (x ** 0).derivatives == 0.0

    # constant base
    np.testing.assert_allclose((3.0 ** x).value, 9.0)
    np.testing.assert_allclose((3.0 ** x).derivatives, 9.0 * np.log(3.0))

    # general rule: d(a^b) = a^b (b' ln a + b a'/a)
    a, b = independent_variables([2.0, 3.0])
    f = a ** b
    np.testing.assert_allclose(f.value, 8.0)
    np.testing.assert_allclose(raw_value(f.derivatives), [3.0 * 4.0, 8.0 * np.log(2.0)])

    # a constant exponent carried as a DualNumber still takes the monomial rule
    neg = DualNumber(-2.0, 1.0)
    sq = neg ** DualNumber(2.0)
    assert sq.value == 4.0
    assert sq.derivatives == -4.0
    x2, _ = independent_variables([-2.0, 1.0], order=2)
    c2 = DualNumber.constant(3.0, like=x2)
    cube = x2 ** c2
    np.testing.assert_allclose(raw_value(cube.derivatives), [12.0, 0.0])
    np.testing.assert_allclose(raw_value(cube.derivatives[0].derivatives), [-12.0, 0.0])


def test_two_argument_functions():
    x, y = independent_variables([3.0, 4.0])
    h = hypot(x, y)
    np.testing.assert_allclose(h.value, 5.0)
    np.testing.assert_allclose(raw_value(h.derivatives), [0.6, 0.8])

    t = atan2(y, x)
    np.testing.assert_allclose(t.value, np.arctan2(4.0, 3.0))
    np.testing.assert_allclose(raw_value(t.derivatives), [-4.0 / 25.0, 3.0 / 25.0])

    assert fmin(x, y) is x
    assert fmax(x, y) is y
    m = fmax(x, 10.0)
    assert m.value == 10.0
    assert m.derivatives == [0.0, 0.0]


def test_abs_and_floor():
    x = DualNumber(-2.0, [1.0, 3.0])
    assert abs(x).value == 2.0
    assert abs(x).derivatives == [-1.0, -3.0]
    assert absolute(x).derivatives == [-1.0, -3.0]
    assert floor(DualNumber(2.7, 1.0)).value == 2.0
    assert floor(DualNumber(2.7, 1.0)).derivatives == 0.0


def test_second_order_hessian_of_monomial():
    x0, y0 = 1.5, 0.7
    x, y = independent_variables([x0, y0], order=2)
    f = x * x * y ** 3

    H = np.array([[raw_value(f.derivatives[i].derivatives[j]) for j in range(2)]
                  for i in range(2)])
    expected = np.array([[2 * y0 ** 3, 6 * x0 * y0 ** 2],
                         [6 * x0 * y0 ** 2, 6 * x0 ** 2 * y0]])
    np.testing.assert_allclose(H, expected, rtol=1e-12)
    np.testing.assert_allclose(hessian(lambda x, y: x * x * y ** 3, [x0, y0]), expected, rtol=1e-12)


def test_grad_and_grad_hessian_helpers():
    np.testing.assert_allclose(grad(lambda x, y: x * x + 3 * y, [2.0, 4.0]), [4.0, 3.0])

    g, H, f0 = grad_hessian(lambda x, y: exp(x) * sin(y), [0.2, 1.0])
    np.testing.assert_allclose(f0, np.exp(0.2) * np.sin(1.0))
    np.testing.assert_allclose(g, [np.exp(0.2) * np.sin(1.0), np.exp(0.2) * np.cos(1.0)])
    np.testing.assert_allclose(H, [[np.exp(0.2) * np.sin(1.0), np.exp(0.2) * np.cos(1.0)],
                                   [np.exp(0.2) * np.cos(1.0), -np.exp(0.2) * np.sin(1.0)]])

    # constant function: zero gradient
    np.testing.assert_allclose(grad(lambda x, y: 7.0, [1.0, 1.0]), [0.0, 0.0])


def test_single_variable_nesting_gives_second_derivative():
    x = DualNumber(DualNumber(2.0, 1.0), DualNumber(1.0, 0.0))
    f = x ** 3
    assert x.order == 2
    assert raw_value(f) == 8.0
    np.testing.assert_allclose(f.derivatives.value, 12.0)        # 3x^2
    np.testing.assert_allclose(f.derivatives.derivatives, 12.0)  # 6x


def test_third_order_nesting():
    (x,) = independent_variables([0.3], order=3)
    f = sin(x)
    d3 = f.derivatives[0].derivatives[0].derivatives[0]
    np.testing.assert_allclose(d3, -np.cos(0.3))


def test_promotion_round_trip():
    x, _ = independent_variables([1.0, 2.0], order=2)
    for c in [0.0, -3.5, 1e300, 7]:
        p = promote(c, x)
        assert isinstance(p, DualNumber)
        assert p.order == 2
        assert raw_value(p) == c
        assert raw_value(p.derivatives[0]) == 0.0


def test_scalar_constant_widens_to_gradient():
    x, y = independent_variables([1.0, 2.0])
    c = DualNumber(4.0)
    s = c + x
    assert s.value == 5.0
    assert s.derivatives == [1.0, 0.0]


def test_mixed_nesting_orders_are_rejected():
    x1, _ = independent_variables([1.0, 2.0], order=1)
    x2, _ = independent_variables([1.0, 2.0], order=2)
    with pytest.raises(ValueError):
        x1 * x2
    # explicit truncation makes them compatible
    p = x1 * truncate(x2, 1)
    assert p.derivatives == [2.0, 0.0]


def test_mixed_orders_truncate_when_check_disabled():
    x1, _ = independent_variables([1.0, 2.0], order=1)
    x2, _ = independent_variables([1.0, 2.0], order=2)
    with use_config(check_nesting=False):
        p = x1 + x2
    assert nesting_order(p) == 1
    assert p.derivatives == [2.0, 0.0]


@pytest.mark.parametrize("narrow", [float, int, complex, operator.index, math.sin, math.sqrt])
def test_implicit_narrowing_is_rejected(narrow):
    x = DualNumber(2.0, [1.0, 0.0])
    with pytest.raises(TypeError):
        narrow(x)


def test_numpy_float_cast_is_rejected():
    x = DualNumber(2.0, [1.0, 0.0])
    with pytest.raises(TypeError):
        np.array([x], dtype=np.float64)


def test_raw_value_is_the_explicit_escape_hatch():
    x, y = independent_variables([2.0, 3.0], order=2)
    f = x * y
    assert raw_value(f) == 6.0
    assert isinstance(raw_value(f), float)
    assert raw_value(4.5) == 4.5


def test_with_value_keeps_the_seed():
    x, _ = independent_variables([1.0, 2.0])
    moved = x.with_value(5.0)
    assert moved.value == 5.0
    assert moved.derivatives == [1.0, 0.0]

    x2, _ = independent_variables([1.0, 2.0], order=2)
    moved2 = x2.with_value(5.0)
    assert raw_value(moved2) == 5.0
    assert moved2.value.derivatives == [1.0, 0.0]


def test_with_value_warns_on_dual_argument():
    x, y = independent_variables([1.0, 2.0])
    with pytest.warns(UserWarning):
        moved = x.with_value(y)
    assert moved.value == 2.0
    assert moved.derivatives == [1.0, 0.0]


def test_rebinding_from_a_scalar_demotes_to_constant():
    x, _ = independent_variables([1.0, 2.0])
    c = DualNumber.constant(3.0, like=x)
    assert c.value == 3.0
    assert c.derivatives == [0.0, 0.0]


def test_comparisons_use_values():
    x = DualNumber(3.0, 1.0)
    y = DualNumber(4.0, -1.0)
    assert x < y
    assert x <= 3.0
    assert y > 3.5
    assert 2.0 < x
    assert x == 3.0
    assert x != y
    assert bool(x)
    assert not bool(DualNumber(0.0, 1.0))
    assert hash(x) == hash(3.0)


def test_numpy_ufuncs_dispatch_to_dual_rules():
    x = DualNumber(0.5, [1.0, 0.0])
    y = np.sin(x)
    assert isinstance(y, DualNumber)
    np.testing.assert_allclose(raw_value(y.derivatives), [np.cos(0.5), 0.0])

    z = np.float64(2.0) * x
    assert isinstance(z, DualNumber)
    assert z.derivatives == [2.0, 0.0]

    w = np.exp(x) + np.float64(1.0)
    np.testing.assert_allclose(w.value, np.exp(0.5) + 1.0)
    assert np.float64(0.25) < x


def test_ndarray_operands_give_object_arrays():
    x = DualNumber(0.5, [1.0, 0.0])
    left = np.array([2.0, 3.0]) * x
    right = x * np.array([2.0, 3.0])
    for r in (left, right):
        assert isinstance(r, np.ndarray)
        assert r.dtype == object
        assert r.shape == (2,)
        assert r[1].value == 1.5
        assert r[1].derivatives == [3.0, 0.0]

    d = x - np.array([1.0, 2.0])
    assert d[1].value == -1.5
    assert d[1].derivatives == [1.0, 0.0]

    t = np.arctan2(np.array([1.0]), x)
    np.testing.assert_allclose(t[0].value, np.arctan2(1.0, 0.5))


def test_domain_errors_flow_as_nan_and_inf():
    with warnings.catch_warnings():
        warnings.simplefilter("error")
        lg = log(DualNumber(-1.0, 1.0))
        assert np.isnan(lg.value)

        lz = log(DualNumber(0.0, 1.0))
        assert np.isneginf(lz.value)
        assert np.isposinf(lz.derivatives)

        sq = sqrt(DualNumber(-4.0, 1.0))
        assert np.isnan(sq.value)
        assert np.isnan(sq.derivatives)

        q = DualNumber(1.0, 1.0) / 0.0
        assert np.isposinf(q.value)
        assert np.isposinf(q.derivatives)


def test_floating_point_policy_can_raise():
    with use_config(floating_point_errors="raise"):
        with pytest.raises(FloatingPointError):
            log(DualNumber(0.0, 1.0))
    # restored afterwards
    assert np.isneginf(log(DualNumber(0.0, 1.0)).value)


def test_invalid_config_is_rejected():
    with pytest.raises(ValueError):
        with use_config(floating_point_errors="loud"):
            pass


def test_non_numeric_operands_are_rejected():
    with pytest.raises(TypeError):
        DualNumber("2.0", 1.0)
    with pytest.raises(TypeError):
        DualNumber(2.0, {"x": 1.0})
    with pytest.raises(TypeError):
        DualNumber(2.0, 1.0) + "a"
