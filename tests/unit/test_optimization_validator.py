"""
tests/unit/test_optimization_validator.py - Tests for input validation and advisory checks.
"""

import pytest
from laseropt.errors import ErrorCode, ValidationError
from laseropt.optimization import (
    AlgorithmType,
    FitnessFunction,
    Individual,
    MaterialType,
    ObjectiveModel,
    ObjectiveVector,
    ObjectiveWeights,
    OptimizationGoal,
    OptimizationValidator,
    ParameterSpace,
    ParameterVector,
    ProcessOptimizationInputs,
    get_profile,
    validate_inputs,
)


def request(**overrides):
    data = {
        "materialType": "steel",
        "thickness": 5,
        "laserPower": 3000,
        "optimizationGoal": "balanced",
        "constraints": {},
        "algorithmType": "genetic",
        "populationSize": 50,
        "generations": 100,
        "convergenceTolerance": 0.01,
    }
    data.update(overrides)
    return validate_inputs(data)


def validator_for(inputs):
    space = ParameterSpace.for_material(inputs.material_type, inputs.laser_power)
    model = ObjectiveModel(get_profile(inputs.material_type), inputs.thickness, space)
    return OptimizationValidator(inputs, model)


class TestValidateInputs:
    """Tests for validate_inputs."""

    def test_camel_case_accepted(self):
        """Test a calculator-style request parses."""
        inputs = request()
        assert inputs.material_type == MaterialType.STEEL
        assert inputs.algorithm_type == AlgorithmType.GENETIC
        assert inputs.population_size == 50
        assert inputs.constraints.is_empty()

    def test_snake_case_accepted(self):
        """Test Python-style keys parse too."""
        inputs = validate_inputs({
            "material_type": "aluminum",
            "thickness": 2.0,
            "laser_power": 2000,
            "population_size": 20,
            "generations": 10,
        })
        assert inputs.material_type == MaterialType.ALUMINUM
        assert inputs.optimization_goal == OptimizationGoal.BALANCED

    def test_model_passes_through(self):
        """Test an already-parsed request is returned as is."""
        inputs = request()
        assert validate_inputs(inputs) is inputs

    @pytest.mark.parametrize("field,value", [
        ("populationSize", 5),
        ("populationSize", 201),
        ("generations", 9),
        ("generations", 501),
        ("convergenceTolerance", 0.5),
        ("thickness", 0.0),
        ("laserPower", 50),
        ("materialType", "wood"),
        ("algorithmType", "random_search"),
    ])
    def test_out_of_range_rejected(self, field, value):
        """Test range and enum violations raise ValidationError."""
        with pytest.raises(ValidationError) as exc:
            request(**{field: value})
        assert exc.value.code == ErrorCode.VAL_SCHEMA
        assert exc.value.recoverable
        assert any(field in message for message in exc.value.field_errors)

    def test_nested_constraint_rejected(self):
        """Test constraint ranges are checked."""
        with pytest.raises(ValidationError) as exc:
            request(constraints={"minQuality": 40})
        assert "constraints.minQuality" in str(exc.value)

    def test_missing_required(self):
        """Test required fields."""
        with pytest.raises(ValidationError):
            validate_inputs({"materialType": "steel"})

    def test_current_parameters_filled_from_fallback(self):
        """Test partial current parameters."""
        inputs = request(currentParameters={"power": 1500})
        fallback = ParameterVector(1.0, 2.0, 3.0, 4.0)
        assert inputs.current_parameters.to_vector(fallback) == ParameterVector(1500.0, 2.0, 3.0, 4.0)


class TestCheckInputs:
    """Tests for advisory input checks."""

    def test_clean_request(self):
        """Test a typical request raises no advisories."""
        assert validator_for(request()).check_inputs() == []

    def test_high_complexity(self):
        """Test population x generations above the limit."""
        warnings = validator_for(request(populationSize=200, generations=300)).check_inputs()
        assert any("complexity" in w.message for w in warnings)

    def test_tight_time_and_high_quality(self):
        """Test constraint advisories."""
        warnings = validator_for(request(constraints={"maxTime": 2, "minQuality": 98})).check_inputs()
        constraints = {w.constraint for w in warnings}
        assert {"maxTime", "minQuality"} <= constraints

    def test_small_population(self):
        """Test diversity advisory."""
        warnings = validator_for(request(populationSize=20)).check_inputs()
        assert any("population" in w.message for w in warnings)


class TestCheckFeasibility:
    """Tests for constraint feasibility."""

    def test_feasible(self):
        """Test reachable constraints produce nothing."""
        inputs = request(constraints={"minQuality": 80, "maxTime": 10, "maxCost": 50, "maxEnergy": 5})
        assert validator_for(inputs).check_feasibility() == []

    def test_weak_laser(self):
        """Test a laser below the material minimum is reported."""
        warnings = validator_for(request(laserPower=300)).check_feasibility()
        assert [w.constraint for w in warnings] == ["laserPower"]
        assert warnings[0].achievable == 500.0

    def test_unreachable_quality(self):
        """Test a quality floor above the reachable maximum."""
        warnings = validator_for(request(laserPower=300, constraints={"minQuality": 95})).check_feasibility()
        quality = [w for w in warnings if w.constraint == "minQuality"]
        assert len(quality) == 1
        assert quality[0].achievable == pytest.approx(82.0)
        assert "quality" in str(quality[0])
        assert quality[0].code == ErrorCode.CON_INFEASIBLE

    def test_unreachable_cost(self):
        """Test a cost ceiling below the material cost alone."""
        warnings = validator_for(request(thickness=40, constraints={"maxCost": 1})).check_feasibility()
        assert [w.constraint for w in warnings] == ["maxCost"]

    def test_unreachable_time(self):
        """Test a time ceiling below the fastest cut."""
        inputs = request(materialType="titanium", thickness=50, laserPower=600, constraints={"maxTime": 1})
        warnings = validator_for(inputs).check_feasibility()
        assert "maxTime" in {w.constraint for w in warnings}


class TestCheckResult:
    """Tests for post-run warnings."""

    def best(self, fitness=0.8, cost=3.0, time=1.0, quality=90.0, energy=0.1):
        return Individual(
            parameters=ParameterVector(1000.0, 3000.0, 1.0, -1.0),
            objectives=ObjectiveVector(cost=cost, time=time, quality=quality, energy=energy),
            fitness=fitness,
        )

    def test_good_result(self):
        """Test a converged, strong optimum has no warnings."""
        assert validator_for(request()).check_result(self.best(), converged=True) == []

    def test_weak_result(self):
        """Test every post-run advisory."""
        warnings = validator_for(request()).check_result(
            self.best(fitness=0.5, cost=12.0, time=25.0), converged=False,
        )
        assert {w.constraint for w in warnings} == {"generations", "fitness", "cost", "time"}

    def test_violated_constraint(self):
        """Test a constraint the optimum still breaks."""
        inputs = request(constraints={"minQuality": 95})
        fitness = FitnessFunction(ObjectiveWeights.from_goal(OptimizationGoal.BALANCED), inputs.constraints)
        warnings = validator_for(inputs).check_result(self.best(quality=82.0), True, fitness)
        violated = [w for w in warnings if w.code == ErrorCode.CON_VIOLATED]
        assert len(violated) == 1
        assert violated[0].constraint == "minQuality"
        assert "quality" in violated[0].message
