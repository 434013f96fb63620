# =============================================================================
# main.py  —  Entry Point for the SUSE Observability SRE Agent
# =============================================================================
#
# HOW TO RUN:
#   python main.py
#
# WHAT HAPPENS:
#   1. Creates the Google ADK agent (agent/sre_agent.py), which spawns the
#      MCP tool server as a subprocess
#   2. Sets up an interactive session
#   3. Sends each question to the agent
#   4. Shows tool calls as they happen, then the final answer
#
# REQUIRED ENVIRONMENT (or .env):
#   SUSE_OBSERVABILITY_URL, SUSE_OBSERVABILITY_TOKEN   for the tool server
#   OPENROUTER_API_KEY (or the key for the provider in AGENT_MODEL)
# =============================================================================

import asyncio

from dotenv import load_dotenv

# Must run before the agent is created: LiteLlm reads its API key, and the
# tool server subprocess inherits the environment, at creation time.
load_dotenv()

from google.adk.runners import Runner
from google.adk.sessions import InMemorySessionService
from google.genai import types

from agent.sre_agent import create_agent

APP_NAME = "suse_observability_sre"
USER_ID = "sre"


async def run_agent():
    """Run the SRE agent interactively until the user quits."""
    print("=" * 70)
    print("  SUSE OBSERVABILITY SRE AGENT")
    print("=" * 70)
    print("\n🔧 Initializing agent...")
    agent = create_agent()

    session_service = InMemorySessionService()
    runner = Runner(
        agent=agent,
        app_name=APP_NAME,
        session_service=session_service,
    )
    session = await session_service.create_session(app_name=APP_NAME, user_id=USER_ID)

    print("✅ Agent initialized and ready!\n")
    print("💬 Ask about the health of your systems (e.g. 'What is critical right now?')")
    print("   (Type 'quit' to exit)\n")
    print("-" * 70)

    while True:
        try:
            user_input = input("\n🧑 You: ").strip()
        except (EOFError, KeyboardInterrupt):
            print("\n\n👋 Goodbye!")
            break

        if user_input.lower() in ("quit", "exit", "q"):
            print("\n👋 Goodbye!")
            break

        if not user_input:
            continue

        user_message = types.Content(
            role="user",
            parts=[types.Part(text=user_input)],
        )

        print("\n🤖 Agent is investigating...\n")
        print("-" * 70)

        final_response = ""
        async for event in runner.run_async(
            user_id=USER_ID,
            session_id=session.id,
            new_message=user_message,
        ):
            if event.content and event.content.parts:
                for part in event.content.parts:
                    if hasattr(part, "text") and part.text:
                        final_response = part.text

                    if hasattr(part, "function_call") and part.function_call:
                        print(f"  🔧 Calling tool: {part.function_call.name}")

        print("-" * 70)
        if final_response:
            print(f"\n🤖 Agent:\n\n{final_response}")
        else:
            print("\n⚠️  No response generated. The agent may have encountered an error.")

        print("\n" + "=" * 70)


if __name__ == "__main__":
    asyncio.run(run_agent())
