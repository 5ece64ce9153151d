"""HTTP interface for the profit tracker."""
