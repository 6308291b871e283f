"""
ATP generation prompt
"""
import textwrap

from pydantic import Field
from mcp.types import GetPromptResult

from ..models import CamelModel
from .base import Capability, prompt_result


class GenerateAtpInput(CamelModel):
    test_case_steps: str = Field(..., description="Test case steps")


class CreateATPCapability(Capability):
    """Prompt-only module for writing ATPs from test case steps"""

    def register_tools(self) -> None:
        pass

    def register_prompts(self) -> None:
        self.server.add_prompt(
            "generate-atp-from-testcase",
            "Generates ATP from test case steps using workspace patterns",
            GenerateAtpInput,
            self.generate_atp_from_testcase,
        )

    def generate_atp_from_testcase(self, params: GenerateAtpInput) -> GetPromptResult:
        text = textwrap.dedent("""\
            ## Workspace Structure Information:
            The workspace contains two key folders:
            1. **Middle Folder**: Contains the actual implementation code and APIs that need to be tested
               - Location: Usually under paths like */Middle/ or */SOM/Middle/
               - Contains: Business logic, services, data classes, and core functionality
               - Purpose: Source of truth for what functionality needs ATP coverage

            2. **Testing/ATP Folder**: Contains existing ATP test implementations and patterns
               - Location: Usually under paths like */Testing/ATPs/ or */SOM/Testing/
               - Contains: Existing ATP files, test helpers, utilities, and patterns
               - Purpose: Reference for ATP structure, naming conventions, and reusable patterns

            ## Important: ATP File Creation Location
            - **Always create the new ATP file in an existing Testing/ATP project within the current workspace**

            ## ATP Generation Workflow:

            ### Step 1 - Prepare ATP Test Case
            - **If testCaseSteps parameter is provided**: Use the provided steps directly for ATP implementation
            - **If testCaseSteps parameter is empty/null**:
              1. Try to read src/helper/testcase.txt and extract the Steps section
              2. If file doesn't exist or no valid test case found, ask user to provide test case steps
            - **Do not search the workspace if there are no steps available**
            - Use the extracted or provided steps for ATP implementation
            - Prepare the Test code for the given steps only
            - In a new file, create a method that:
              * Adds // <ai generated code> below the copyright

            ### Step 2 - Search Workspace
            - **Analyze Both Folders**: Cross-reference Middle APIs with existing ATP patterns
              - Match test case functionality with Middle layer implementation

            ### Step 3 - Generate & Build
            - **Write ATP Implementation**:
              - Use Middle folder APIs and functionality for the actual test implementation
              - Implement test logic that exercises the Middle layer functionality specified in test case steps

            - **Build Validation**:
              - Run dotnet build . until successful
              - Resolve any compilation errors by checking Middle folder API usage

            ### Step 4 - Run
            - **ATP Generation Complete**: The ATP has been successfully generated and built
            - **Next Step for User**: Run the ATP using the appropriate executable""")
        # steps are user text and may span lines, so they stay outside the dedented template
        header = f'Generate ATP from test case steps: "{params.test_case_steps}"\n\n'
        return prompt_result("Generate ATP using workspace patterns", header + text)
