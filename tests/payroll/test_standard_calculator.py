from src.hrms.hrms.payroll.calculator.standard_calculator import StandardPayrollCalculator
from src.hrms.hrms.payroll.model import PayComponents


def test_standard_calculator_nets_components():
    pay = PayComponents(basic=50000, hra=10000, allowances=5000, deductions=2000)

    calc = StandardPayrollCalculator()
    assert calc.net_pay(pay) == 63000


def test_standard_calculator_defaults_missing_components_to_zero():
    assert StandardPayrollCalculator().net_pay(PayComponents(basic=1200.5)) == 1200.5


def test_gross_pay_excludes_deductions_and_net_rounds_to_cents():
    pay = PayComponents(basic=1000.111, hra=0.1, allowances=0.2, deductions=0.333)

    calc = StandardPayrollCalculator()
    assert calc.gross_pay(pay) == 1000.41
    assert calc.net_pay(pay) == 1000.08
