import math
import asteval

def create_configured_asteval():
    """
    Factory function to create and configure a new asteval.Interpreter instance.
    Internal units are mm for length and g for mass, so "2.33*g/cm3" evaluates
    to a density in g/mm3.
    """
    aeval = asteval.Interpreter(symtable={}, minimal=True, no_if=True, no_for=True, no_while=True, no_try=True)

    # Add safe math functions
    for func_name in ['sin', 'cos', 'tan', 'asin', 'acos', 'atan', 'atan2',
                      'sqrt', 'exp', 'log', 'log10', 'pow', 'abs']:
        if hasattr(math, func_name):
            aeval.symtable[func_name] = getattr(math, func_name)

    # Add constants and units
    aeval.symtable.update({
        'pi': math.pi, 'PI': math.pi, 'inf': math.inf,
        'um': 1e-3, 'mm': 1.0, 'cm': 10.0, 'm': 1000.0,
        'mm3': 1.0, 'cm3': 1e3, 'm3': 1e9,
        'mg': 1e-3, 'g': 1.0, 'kg': 1e3,
        'rad': 1.0, 'deg': math.pi / 180.0,
        'degree': math.pi / 180.0
    })

    return aeval

class ExpressionEvaluator:
    """A centralized, safe expression evaluator using asteval."""

    def __init__(self):
        self.interpreter = create_configured_asteval()

    def evaluate(self, expression):
        """
        Safely evaluates an expression string.

        Args:
            expression (str): The string expression to evaluate, e.g. "352.8*mm".

        Returns:
            tuple: A tuple containing (bool, result).
                   - If successful: (True, evaluated_value)
                   - If failed: (False, error_message_string)
        """
        try:
            result = self.interpreter.eval(expression, show_errors=False, raise_errors=True)
        except Exception as e:
            # asteval exceptions are descriptive and safe to show the user.
            return False, str(e)
        if isinstance(result, bool) or not isinstance(result, (int, float)):
            return False, f"Expression '{expression}' did not evaluate to a number"
        return True, float(result)
