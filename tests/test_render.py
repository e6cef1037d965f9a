import unittest

from symderiv_core import (
    Add, Constant, Div, Exp, Ln, Mul, Parameter, Pow, Sub, Variable,
    parse_formula,
)
from symderiv_derive import derive
from symderiv_fraction import ExactFraction
from symderiv_render import RenderMode, render

x = Variable("x")
y = Parameter("y")
z = Parameter("z")
a = Parameter("a")
b = Parameter("b")
c = Parameter("c")
NEG = Constant(-1)
TYPESET = RenderMode.TYPESET


def plain(src, variable="x"):
    return render(parse_formula(src, variable))


def plain_derivative(src, variable="x"):
    return render(derive(parse_formula(src, variable), variable))


class TestScenarios(unittest.TestCase):

    def test_polynomial_minus_exponential(self):
        self.assertEqual(plain("x^2-2^x"), "x^2-2^x")
        # the 2^x branch loses its zero term, nothing is cancelled algebraically
        self.assertEqual(plain_derivative("x^2-2^x"), "x^2*2*1/x-2^x*\\ln(2)")

    def test_parameter_over_variable(self):
        self.assertEqual(plain("a/x"), "a/x")
        self.assertEqual(plain_derivative("a/x"), "(-a)/x^2")

    def test_constant_fraction(self):
        self.assertEqual(plain("3/7"), "3/7")
        self.assertEqual(plain_derivative("3/7"), "0")

    def test_showcase_formula(self):
        self.assertEqual(
            plain("(ln(x) - exp(x))*x + a/x + x^2 - 2^x"),
            "(\\ln(x)-exp(x))*x+a/x+x^2-2^x",
        )

    def test_e_is_a_parameter(self):
        self.assertEqual(plain("e^x"), "e^x")
        self.assertEqual(plain_derivative("e^x"), "e^x*\\ln(e)")

    def test_simple_derivatives(self):
        self.assertEqual(plain_derivative("x"), "1")
        self.assertEqual(plain_derivative("a*x"), "a")
        self.assertEqual(plain_derivative("ln(x)"), "1/x")
        self.assertEqual(plain_derivative("exp(x)"), "exp(x)")
        self.assertEqual(plain_derivative("x*x"), "x+x")
        self.assertEqual(plain_derivative("t^2", "t"), "t^2*2*1/t")


class TestFolding(unittest.TestCase):

    def test_products(self):
        self.assertEqual(render(Mul(Constant(0), x)), "0")
        self.assertEqual(render(Mul(x, Constant(0))), "0")
        self.assertEqual(render(Mul(Constant(1), x)), "x")
        self.assertEqual(render(Mul(x, Constant(1))), "x")

    def test_powers(self):
        self.assertEqual(render(Pow(x, Constant(0))), "1")
        self.assertEqual(render(Pow(x, Constant(1))), "x")
        self.assertEqual(render(Pow(Add(x, a), Constant(1))), "x+a")

    def test_quotients(self):
        self.assertEqual(render(Div(x, Constant(1))), "x")
        self.assertEqual(render(Div(Constant(0), x)), "0")

    def test_functions(self):
        self.assertEqual(render(Ln(Constant(1))), "0")
        self.assertEqual(render(Exp(Constant(0))), "1")
        self.assertEqual(render(Exp(Constant(1))), "e")
        self.assertEqual(render(Ln(Mul(Constant(1), Constant(1)))), "0")

    def test_sums_and_differences(self):
        self.assertEqual(render(Add(Constant(0), x)), "x")
        self.assertEqual(render(Add(x, Constant(0))), "x")
        self.assertEqual(render(Sub(x, Constant(0))), "x")
        self.assertEqual(render(Sub(Constant(0), x)), "(-x)")
        self.assertEqual(render(Sub(Constant(0), Add(x, a))), "(-(x+a))")

    def test_adding_a_negative_drops_the_plus(self):
        self.assertEqual(render(Add(x, Mul(NEG, y))), "x-y")
        self.assertEqual(render(Add(x, Constant(-3))), "x-3")

    def test_leading_negation(self):
        self.assertEqual(render(Mul(NEG, x)), "-x")
        self.assertEqual(render(Mul(x, NEG)), "-x")
        self.assertEqual(render(Mul(NEG, Add(x, Constant(1)))), "-(x+1)")
        self.assertEqual(render(Mul(NEG, Pow(x, Constant(2)))), "-(x^2)")
        self.assertEqual(render(Mul(NEG, Mul(a, x))), "-a*x")
        self.assertEqual(render(Mul(NEG, Mul(NEG, x))), "-(-x)")

    def test_identical_factors_square_only_in_a_divisor(self):
        self.assertEqual(render(Div(a, Mul(x, x))), "a/x^2")
        self.assertEqual(render(Div(a, Mul(Add(x, a), Add(x, a)))), "a/(x+a)^2")
        self.assertEqual(render(Div(Constant(1), Mul(Mul(NEG, x), Mul(NEG, x)))), "1/(-x)^2")
        self.assertEqual(render(Div(a, Mul(Constant(1), Constant(1)))), "a")

    def test_written_products_keep_both_factors(self):
        self.assertEqual(render(Mul(x, x)), "x*x")
        self.assertEqual(render(Mul(Add(x, a), Add(x, a))), "(x+a)*(x+a)")
        self.assertEqual(render(Div(Mul(x, x), a)), "x*x/a")
        self.assertEqual(plain("x*x"), "x*x")

    def test_folding_is_not_materialized(self):
        expr = Mul(Constant(1), x)
        render(expr)
        self.assertEqual(expr, Mul(Constant(1), x))


class TestParenthesization(unittest.TestCase):

    def test_products_group_sums(self):
        self.assertEqual(render(Mul(Add(a, b), c)), "(a+b)*c")
        self.assertEqual(render(Mul(c, Sub(a, b))), "c*(a-b)")
        self.assertEqual(render(Mul(a, Mul(b, c))), "a*b*c")

    def test_negative_right_factor_is_grouped(self):
        self.assertEqual(render(Mul(x, Mul(NEG, y))), "x*(-y)")
        self.assertEqual(render(Mul(x, Constant(-3))), "x*(-3)")
        self.assertEqual(render(Mul(Mul(NEG, x), y)), "-x*y")
        self.assertEqual(render(Mul(x, Mul(NEG, y)), TYPESET), "x \\cdot \\left(-y\\right)")

    def test_quotients(self):
        self.assertEqual(render(Div(Add(a, b), c)), "(a+b)/c")
        self.assertEqual(render(Div(a, Mul(b, c))), "a/(b*c)")
        self.assertEqual(render(Div(a, Div(b, c))), "a/(b/c)")
        self.assertEqual(render(Div(Div(a, b), c)), "a/b/c")
        self.assertEqual(render(Div(a, Mul(NEG, b))), "a/(-b)")

    def test_quotient_never_glues_digits_into_a_fraction_literal(self):
        self.assertEqual(render(Div(Constant(2), Constant(3))), "2/3")
        self.assertEqual(render(Div(Pow(x, Constant(2)), Constant(3))), "(x^2)/3")
        self.assertEqual(render(Div(Div(x, Constant(2)), Constant(3))), "(x/2)/3")
        self.assertEqual(render(Div(Constant(3), Pow(Constant(2), x))), "(3)/2^x")
        self.assertEqual(render(Div(Constant(3), Constant(ExactFraction(2, 5)))), "3/(2/5)")

    def test_power_bases(self):
        self.assertEqual(render(Pow(x, y)), "x^y")
        self.assertEqual(render(Pow(Constant(2), x)), "2^x")
        self.assertEqual(render(Pow(Add(x, Constant(1)), Constant(2))), "(x+1)^2")
        self.assertEqual(render(Pow(Ln(x), Constant(2))), "(\\ln(x))^2")
        self.assertEqual(render(Pow(Exp(x), Constant(2))), "(exp(x))^2")
        self.assertEqual(render(Pow(Parameter("e"), x)), "e^x")
        self.assertEqual(render(Pow(Pow(x, y), z)), "(x^y)^z")
        self.assertEqual(render(Pow(Constant(-3), x)), "(-3)^x")
        self.assertEqual(render(Pow(Constant(ExactFraction(3, 7)), x)), "(3/7)^x")

    def test_power_exponents(self):
        self.assertEqual(render(Pow(x, Pow(y, z))), "x^(y^z)")
        self.assertEqual(render(Pow(x, Add(y, z))), "x^(y+z)")
        self.assertEqual(render(Pow(x, Mul(y, z))), "x^(y*z)")
        self.assertEqual(render(Pow(x, Constant(ExactFraction(2, 3)))), "x^(2/3)")
        self.assertEqual(render(Pow(x, Mul(NEG, Constant(2)))), "x^-2")
        self.assertEqual(render(Pow(x, Ln(y))), "x^\\ln(y)")

    def test_differences(self):
        self.assertEqual(render(Sub(a, Add(b, c))), "a-(b+c)")
        self.assertEqual(render(Sub(a, Sub(b, c))), "a-(b-c)")
        self.assertEqual(render(Sub(Sub(a, b), c)), "a-b-c")
        self.assertEqual(render(Sub(a, Mul(b, c))), "a-b*c")
        self.assertEqual(render(Sub(a, Mul(NEG, b))), "a-(-b)")

    def test_sums_never_group(self):
        self.assertEqual(render(Add(a, Add(b, c))), "a+b+c")
        self.assertEqual(render(Add(Sub(a, b), c)), "a-b+c")

    def test_constants(self):
        self.assertEqual(render(Constant(ExactFraction(-3, 7))), "-3/7")
        self.assertEqual(render(Constant(-4)), "-4")
        self.assertEqual(render(Mul(x, Constant(ExactFraction(2, 3)))), "x*2/3")


class TestTypeset(unittest.TestCase):

    def test_scenarios(self):
        self.assertEqual(render(parse_formula("a/x"), TYPESET), "\\frac{a}{x}")
        self.assertEqual(
            render(derive(parse_formula("a/x")), TYPESET),
            "\\frac{\\left(-a\\right)}{x^{2}}",
        )
        self.assertEqual(render(parse_formula("x^2-2^x"), TYPESET), "x^{2}-2^{x}")
        self.assertEqual(
            render(derive(parse_formula("x^2-2^x")), TYPESET),
            "x^{2} \\cdot 2 \\cdot \\frac{1}{x}-2^{x} \\cdot \\ln\\left(2\\right)",
        )

    def test_glyphs(self):
        self.assertEqual(render(Mul(Add(a, b), c), TYPESET), "\\left(a+b\\right) \\cdot c")
        self.assertEqual(render(Exp(x), TYPESET), "e^{x}")
        self.assertEqual(render(Ln(x), TYPESET), "\\ln\\left(x\\right)")
        self.assertEqual(render(Pow(x, Add(y, z)), TYPESET), "x^{y+z}")
        self.assertEqual(render(Pow(Div(a, b), Constant(2)), TYPESET),
                         "\\left(\\frac{a}{b}\\right)^{2}")
        self.assertEqual(render(Constant(ExactFraction(3, 7)), TYPESET), "\\frac{3}{7}")
        self.assertEqual(render(Constant(ExactFraction(-3, 7)), TYPESET), "-\\frac{3}{7}")

    def test_same_folding_in_both_modes(self):
        self.assertEqual(render(Exp(Constant(1)), TYPESET), "e")
        self.assertEqual(render(Mul(Constant(0), x), TYPESET), "0")
        self.assertEqual(render(Div(a, Mul(x, x)), TYPESET), "\\frac{a}{x^{2}}")
        self.assertEqual(render(Mul(x, x), TYPESET), "x \\cdot x")

    def test_mode_accepts_plain_strings(self):
        self.assertEqual(render(Div(a, x), "typeset"), "\\frac{a}{x}")
        self.assertEqual(render(Div(a, x), "plain"), "a/x")
        with self.assertRaises(ValueError):
            render(x, "fancy")


class TestRoundTrip(unittest.TestCase):

    FORMULAS = [
        "x^2-2^x",
        "a/x",
        "3/7",
        "(a+b)*c",
        "a-(b-c)",
        "a-b-c",
        "x^(y^z)",
        "(x^y)^z",
        "-(x+1)",
        "-(x^2)",
        "(-x)^2",
        "x*(-y)",
        "a/(-b)",
        "(3)/2^x",
        "e^x",
        "e^(x+1)",
        "x^-2",
        "a/(b*c)",
        "(x^2)/3",
        "x*2/3",
        "(3/7)^x",
        "-3/7",
        "\\ln(x)*exp(x)",
        "exp(x^2)",
        "(exp(x))^2",
        "x*x",
        "(\\ln(x))^2",
        "(\\ln(x)-exp(x))*x+a/x+x^2-2^x",
    ]

    def test_render_parse_render_is_stable(self):
        for src in self.FORMULAS:
            with self.subTest(src=src):
                once = plain(src)
                self.assertEqual(once, src)
                self.assertEqual(plain(once), once)

    def test_parsed_tree_survives_round_trip(self):
        for src in self.FORMULAS:
            with self.subTest(src=src):
                expr = parse_formula(src)
                self.assertEqual(parse_formula(render(expr)), expr)

    def test_power_of_parameter_e_reads_back(self):
        expr = Pow(Parameter("e"), x)
        self.assertEqual(parse_formula(render(expr)), expr)
        self.assertEqual(render(parse_formula(render(expr))), render(expr))

    def test_exponential_reads_back(self):
        expr = Exp(Mul(a, x))
        self.assertEqual(render(expr), "exp(a*x)")
        self.assertEqual(parse_formula(render(expr)), expr)


if __name__ == '__main__':
    unittest.main()
