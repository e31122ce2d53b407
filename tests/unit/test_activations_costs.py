import numpy as np
import pytest

from backpropnets.core.activations import Activation
from backpropnets.core.costs import Cost, Regularisation
from backpropnets.core.errors import UnsupportedOperationError


def test_sigmoid_evaluate_and_derivative():
    z = np.array([-2.0, 0.0, 3.0])
    s = 1.0 / (1.0 + np.exp(-z))
    assert np.allclose(Activation.SIGMOID.evaluate(z), s)
    assert np.allclose(Activation.SIGMOID.derivative(z), s * (1 - s))
    assert Activation.SIGMOID.evaluate(0.0) == pytest.approx(0.5)


def test_softmax_per_element_contract_is_unsupported():
    with pytest.raises(UnsupportedOperationError):
        Activation.SOFTMAX.evaluate(0.3)
    with pytest.raises(UnsupportedOperationError):
        Activation.SOFTMAX.derivative(np.zeros(3))


def test_softmax_vector_form_normalises():
    z = np.array([1.0, 2.0, 3.0], dtype=np.float32)
    out = Activation.SOFTMAX.apply(z)
    assert out.dtype == np.float32
    assert np.isclose(out.sum(), 1.0, atol=1e-6)
    assert np.argmax(out) == 2


def test_cross_entropy_sigmoid_is_fused_exactly():
    rng = np.random.default_rng(0)
    output = rng.uniform(0.01, 0.99, size=10).astype(np.float32)
    expected = rng.uniform(0.01, 0.99, size=10).astype(np.float32)
    z = rng.normal(size=10).astype(np.float32)
    result = Cost.CROSS_ENTROPY.c_dz(Activation.SIGMOID, output, expected, z)
    assert np.array_equal(result, output - expected)


def test_log_likelihood_softmax_is_fused():
    output = np.array([0.2, 0.7, 0.1])
    expected = np.array([0.0, 1.0, 0.0])
    result = Cost.LOG_LIKELIHOOD.c_dz(Activation.SOFTMAX, output, expected, np.zeros(3))
    assert np.array_equal(result, output - expected)


def test_quadratic_uses_activation_derivative():
    z = np.array([0.5, -1.0])
    output = Activation.SIGMOID.evaluate(z)
    expected = np.array([1.0, 0.0])
    result = Cost.QUADRATIC.c_dz(Activation.SIGMOID, output, expected, z)
    assert np.allclose(result, (output - expected) * Activation.SIGMOID.derivative(z))


@pytest.mark.parametrize(
    "cost, activation",
    [
        (Cost.CROSS_ENTROPY, Activation.SOFTMAX),
        (Cost.LOG_LIKELIHOOD, Activation.SIGMOID),
        (Cost.QUADRATIC, Activation.SOFTMAX),
    ],
)
def test_unimplemented_pairings_fail(cost, activation):
    with pytest.raises(UnsupportedOperationError):
        cost.c_dz(activation, np.full(2, 0.5), np.array([1.0, 0.0]), np.zeros(2))


def test_cost_values():
    output = np.array([0.8, 0.2])
    expected = np.array([1.0, 0.0])
    assert Cost.QUADRATIC.evaluate(output, expected) == pytest.approx(0.04)
    assert Cost.CROSS_ENTROPY.evaluate(output, expected) == pytest.approx(-2 * np.log(0.8))
    assert Cost.LOG_LIKELIHOOD.evaluate(output, expected) == pytest.approx(-np.log(0.8))
    assert np.allclose(Cost.QUADRATIC.derivative(output, expected), [-0.2, 0.2])


def _weights():
    return np.array([[1.0, -2.0]]), np.array([[0.5, 0.5]])


def test_regularisation_none():
    weights, grad = _weights()
    Regularisation.none().apply(weights, grad, learning_rate=0.1, batch_size=2)
    assert np.allclose(weights, [[0.975, -2.025]])


def test_regularisation_l1_scales_before_gradient_step():
    weights, grad = _weights()
    Regularisation.l1(0.2).apply(weights, grad, learning_rate=0.1, batch_size=2)
    assert np.allclose(weights, [[0.965, -2.005]])


def test_regularisation_l2_adds_sign_term():
    weights, grad = _weights()
    Regularisation.l2(0.2).apply(weights, grad, learning_rate=0.1, batch_size=2)
    assert np.allclose(weights, [[0.965, -2.015]])


def test_regularisation_from_config():
    assert Regularisation.from_config(None) == Regularisation.none()
    assert Regularisation.from_config("none") == Regularisation.none()
    assert Regularisation.from_config({"kind": "L2", "lambda": 0.5}) == Regularisation.l2(0.5)
    with pytest.raises(ValueError):
        Regularisation.from_config({"kind": "l3"})


def test_cost_enum_values_are_names():
    assert [cost.value for cost in Cost] == ["quadratic", "cross_entropy", "log_likelihood"]


def test_unimplemented_pairing_message_names_cost_and_activation():
    with pytest.raises(UnsupportedOperationError, match="cross_entropy cost is not implemented for softmax"):
        Cost.CROSS_ENTROPY.c_dz(Activation.SOFTMAX, np.full(2, 0.5), np.array([1.0, 0.0]), np.zeros(2))


@pytest.mark.parametrize(
    "config",
    [{"kind": "l2"}, "l1", {"kind": "l1", "lambda": -0.1}],
)
def test_regularisation_from_config_needs_non_negative_lambda(config):
    with pytest.raises(ValueError):
        Regularisation.from_config(config)


def test_regularisation_rejects_negative_lambda():
    with pytest.raises(ValueError):
        Regularisation.l2(-1.0)
    assert Regularisation.from_config({"kind": "none", "lambda": 3.0}) == Regularisation.none()
