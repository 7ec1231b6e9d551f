import numpy as np

# Every node function receives its operands as an array of shape (arity,)
# for one sample, or (arity, n_samples) for a batch, plus the node's
# connection weights of shape (arity,). Reductions run over axis 0.

def add_function(x, w):
    return np.sum(x, axis=0)

def sub_function(x, w):
    return x[0] - np.sum(x[1:], axis=0)

def mul_function(x, w):
    return np.prod(x, axis=0)

def div_function(x, w):
    out = x[0]
    for operand in x[1:]:
        out = out / operand
    return out

def abs_function(x, w):
    return np.abs(x[0])

def sqrt_function(x, w):
    return np.sqrt(x[0])

def square_function(x, w):
    return x[0] ** 2

def cube_function(x, w):
    return x[0] ** 3

def pow_function(x, w):
    # with a single operand there is no exponent to apply
    if len(x) < 2:
        return x[0]
    return np.power(x[0], x[1])

def exp_function(x, w):
    return np.exp(x[0])

def sin_function(x, w):
    return np.sin(x[0])

def cos_function(x, w):
    return np.cos(x[0])

def tan_function(x, w):
    return np.tan(x[0])

def rand_function(x, w, rng):
    return rng.uniform(-1.0, 1.0, size=x.shape[1:])

def one_function(x, w):
    return 1.0

def zero_function(x, w):
    return 0.0

def pi_function(x, w):
    return np.pi

def and_function(x, w):
    return np.where(np.any(x == 0, axis=0), 0.0, 1.0)

def nand_function(x, w):
    return np.where(np.any(x == 0, axis=0), 1.0, 0.0)

def or_function(x, w):
    return np.where(np.any(x == 1, axis=0), 1.0, 0.0)

def nor_function(x, w):
    return np.where(np.any(x == 1, axis=0), 0.0, 1.0)

def xor_function(x, w):
    # "one hot": true iff exactly one operand is 1
    return np.where(np.sum(x == 1, axis=0) == 1, 1.0, 0.0)

def xnor_function(x, w):
    return np.where(np.sum(x == 1, axis=0) == 1, 0.0, 1.0)

def not_function(x, w):
    return np.where(x[0] == 0, 1.0, 0.0)

def wire_function(x, w):
    return x[0]

def weighted_sum(x, w):
    return np.tensordot(w, x, axes=1)

def sigmoid_function(x, w):
    return 1.0 / (1.0 + np.exp(-weighted_sum(x, w)))

def gaussian_function(x, w):
    s = weighted_sum(x, w)
    return np.exp(-(s ** 2) / 2.0)

def step_function(x, w):
    return np.where(weighted_sum(x, w) < 0, 0.0, 1.0)

def softsign_function(x, w):
    s = weighted_sum(x, w)
    return s / (1.0 + np.abs(s))

def tanh_function(x, w):
    return np.tanh(weighted_sum(x, w))

functions = {
    "add"  : add_function,
    "sub"  : sub_function,
    "mul"  : mul_function,
    "div"  : div_function,
    "abs"  : abs_function,
    "sqrt" : sqrt_function,
    "sq"   : square_function,
    "cube" : cube_function,
    "pow"  : pow_function,
    "exp"  : exp_function,
    "sin"  : sin_function,
    "cos"  : cos_function,
    "tan"  : tan_function,
    "rand" : rand_function,
    "1"    : one_function,
    "0"    : zero_function,
    "pi"   : pi_function,
    "and"  : and_function,
    "nand" : nand_function,
    "or"   : or_function,
    "nor"  : nor_function,
    "xor"  : xor_function,
    "xnor" : xnor_function,
    "not"  : not_function,
    "wire" : wire_function,
    "sig"  : sigmoid_function,
    "gauss": gaussian_function,
    "step" : step_function,
    "soft" : softsign_function,
    "tanh" : tanh_function,
}

# Declared maximum number of operands; -1 means "as many as the chromosome arity".
function_arities = {
    "add"  : -1, "sub" : -1, "mul": -1, "div" : -1,
    "abs"  :  1, "sqrt":  1, "sq" :  1, "cube":  1, "pow": 2,
    "exp"  :  1, "sin" :  1, "cos":  1, "tan" :  1,
    "rand" :  0, "1"   :  0, "0"  :  0, "pi"  :  0,
    "and"  : -1, "nand": -1, "or" : -1, "nor" : -1, "xor": -1, "xnor": -1, "not": 1,
    "wire" :  1,
    "sig"  : -1, "gauss": -1, "step": -1, "soft": -1, "tanh": -1,
}

# Functions that draw from the chromosome's random generator.
stochastic_functions = {"rand"}
