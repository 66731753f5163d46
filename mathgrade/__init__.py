"""MathGrade: deterministic grading of free-form math answers."""
