"""Console entrypoint for the profit tracker."""
