"""Test plan tools: plans, suites, test cases and build results."""
import logging

from mcp.types import CallToolResult

from .. import formatters, schemas
from ..connection import AdoConnection, segments
from ..registry import ToolRegistry
from .workitems import JSON_PATCH

logger = logging.getLogger("ado-mcp.tools.testplans")

TEST_CASE_TYPE = "Test Case"


async def handle_list_test_plans(
    params: schemas.ListTestPlans,
    connection: AdoConnection,
) -> CallToolResult:
    result = await connection.get(
        f"{segments(params.project)}/_apis/testplan/plans",
        params={
            "filterActivePlans": params.filter_active_plans,
            "includePlanDetails": params.include_plan_details,
            "continuationToken": params.continuation_token,
        },
    )
    plans = (result or {}).get("value")
    if not plans:
        return formatters.empty_result("No test plans found")

    logger.info(f"Successfully listed {len(plans)} test plans for project {params.project}")
    return formatters.json_result(plans)


async def handle_create_test_plan(
    params: schemas.CreateTestPlan,
    connection: AdoConnection,
) -> CallToolResult:
    body = {
        "name": params.name,
        "iteration": params.iteration,
        "description": params.description,
        "startDate": params.start_date.isoformat() if params.start_date else None,
        "endDate": params.end_date.isoformat() if params.end_date else None,
        "areaPath": params.area_path,
    }
    plan = await connection.post(
        f"{segments(params.project)}/_apis/testplan/plans",
        json={k: v for k, v in body.items() if v is not None},
    )
    logger.info(f"Created test plan {(plan or {}).get('id')} in project {params.project}")
    return formatters.json_result(plan)


async def handle_create_test_case(
    params: schemas.CreateTestCase,
    connection: AdoConnection,
) -> CallToolResult:
    """Create a "Test Case" work item, with steps rendered to the TCM XML format."""
    fields = {
        "System.Title": params.title,
        "Microsoft.VSTS.TCM.Steps": formatters.format_test_steps(params.steps) or None,
        "Microsoft.VSTS.Common.Priority": params.priority,
        "System.AreaPath": params.area_path,
        "System.IterationPath": params.iteration_path,
    }
    document = [
        {"op": "add", "path": f"/fields/{name}", "value": value}
        for name, value in fields.items()
        if value is not None
    ]

    work_item = await connection.post(
        f"{segments(params.project)}/_apis/wit/workitems/${segments(TEST_CASE_TYPE)}",
        json=document,
        headers=JSON_PATCH,
    )
    logger.info(f"Created test case {(work_item or {}).get('id')} in project {params.project}")
    return formatters.json_result(work_item)


async def handle_list_test_cases(
    params: schemas.ListTestCases,
    connection: AdoConnection,
) -> CallToolResult:
    result = await connection.get(
        f"{segments(params.project)}/_apis/testplan/Plans/{params.plan_id}/Suites/{params.suite_id}/TestCase"
    )
    test_cases = (result or {}).get("value")
    if not test_cases:
        return formatters.empty_result("No test cases found")

    return formatters.json_result(test_cases)


async def handle_add_test_cases_to_suite(
    params: schemas.AddTestCasesToSuite,
    connection: AdoConnection,
) -> CallToolResult:
    """Add test cases to a suite one at a time, in the order given."""
    base = f"{segments(params.project)}/_apis/test/Plans/{params.plan_id}/suites/{params.suite_id}/testcases"
    results = []

    for test_case_id in params.test_case_ids:
        added = await connection.post(f"{base}/{test_case_id}")
        results.extend((added or {}).get("value") or [])
        logger.info(f"Added test case {test_case_id} to suite {params.suite_id}")

    if not results:
        return formatters.empty_result("No test cases were added to the suite")

    return formatters.json_result(results)


async def handle_show_test_results_from_build_id(
    params: schemas.ShowTestResultsFromBuildId,
    connection: AdoConnection,
) -> CallToolResult:
    summary = await connection.get(
        f"{segments(params.project)}/_apis/test/resultsummarybybuild",
        params={"buildId": params.build_id},
        api_version="7.1-preview.1",
    )
    if not summary:
        return formatters.empty_result("No test results found for this build")

    return formatters.json_result(summary)


def configure_test_plan_tools(registry: ToolRegistry) -> None:
    registry.register(
        "testplan_list_test_plans",
        "Retrieve a paginated list of test plans from an Azure DevOps project.",
        schemas.ListTestPlans,
        handle_list_test_plans,
        failure_message="Error fetching test plans",
    )
    registry.register(
        "testplan_create_test_plan",
        "Creates a new test plan in the project.",
        schemas.CreateTestPlan,
        handle_create_test_plan,
        failure_message="Error creating test plan",
    )
    registry.register(
        "testplan_create_test_case",
        "Creates a new test case work item.",
        schemas.CreateTestCase,
        handle_create_test_case,
        failure_message="Error creating test case",
    )
    registry.register(
        "testplan_list_test_cases",
        "Gets a list of test cases in the test plan.",
        schemas.ListTestCases,
        handle_list_test_cases,
        failure_message="Error fetching test cases",
    )
    registry.register(
        "testplan_add_test_cases_to_suite",
        "Adds existing test cases to a test suite.",
        schemas.AddTestCasesToSuite,
        handle_add_test_cases_to_suite,
        failure_message="Error adding test cases to suite",
    )
    registry.register(
        "testplan_show_test_results_from_build_id",
        "Gets a list of test results for a given project and build ID.",
        schemas.ShowTestResultsFromBuildId,
        handle_show_test_results_from_build_id,
        failure_message="Error fetching test results",
    )
