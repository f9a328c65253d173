"""Holiday lookups, CRUD and the cascading recalculation of affected vacancies."""
