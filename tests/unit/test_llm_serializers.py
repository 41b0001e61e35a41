from cart_pilot.agent.prompts import BROWSER_ACTION_TOOL
from cart_pilot.llm.google.serializer import GoogleMessageSerializer
from cart_pilot.llm.messages import AssistantMessage, SystemMessage, UserMessage
from cart_pilot.llm.openai.serializer import OpenAIMessageSerializer


def test_openai_messages_and_forced_tool():
    messages = [SystemMessage(content="rules"), UserMessage(content="goal"), AssistantMessage(content="browser_action(navigate)")]

    assert OpenAIMessageSerializer.serialize_messages(messages) == [
        {"role": "system", "content": "rules"},
        {"role": "user", "content": "goal"},
        {"role": "assistant", "content": "browser_action(navigate)"},
    ]
    tools = OpenAIMessageSerializer.serialize_tools([BROWSER_ACTION_TOOL])
    assert tools[0]["function"]["name"] == "browser_action"
    assert OpenAIMessageSerializer.serialize_tool_choice("browser_action") == {
        "type": "function",
        "function": {"name": "browser_action"},
    }
    assert OpenAIMessageSerializer.serialize_tool_choice("auto") == "auto"


def test_google_splits_system_instruction_and_keeps_later_notes():
    messages = [
        SystemMessage(content="rules"),
        UserMessage(content="goal"),
        AssistantMessage(content="browser_action(click)"),
        SystemMessage(content="Try reading the page"),
    ]

    contents, system_instruction = GoogleMessageSerializer.serialize_messages(messages)

    assert system_instruction == "rules"
    assert [content.role for content in contents] == ["user", "model", "user"]
    assert contents[2].parts[0].text.startswith("[System note]")


def test_google_tool_declaration_keeps_enum_and_required():
    tool = GoogleMessageSerializer.serialize_tools([BROWSER_ACTION_TOOL])[0]
    declaration = tool.function_declarations[0]

    assert declaration.name == "browser_action"
    assert declaration.parameters.required == ["action", "reasoning"]
    assert declaration.parameters.properties["action"].enum == ["navigate", "click", "type", "read_text", "finish"]


def test_openai_client_is_created_once():
    from cart_pilot.llm.openai.chat import ChatOpenAI

    llm = ChatOpenAI(model="gpt-4o-mini", api_key="sk-test")
    client = llm.get_client()
    assert llm.get_client() is client
    assert "_client" not in repr(llm)
