"""buildorbit core — parsing, tree model, layout, hit-test and build tracking."""
