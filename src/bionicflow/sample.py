SAMPLE_TEXT = """Welcome to BionicFlow. This is a sample text designed to demonstrate the capabilities of Rapid Serial Visual Presentation (RSVP). By highlighting the Optimal Recognition Point (ORP) in each word, your eyes are guided through the text, reducing saccades and enabling you to read significantly faster while maintaining comprehension.

Traditional reading requires your eyes to move from word to word, scanning for the unique shape that allows recognition. This process takes time. Bionic reading principles accelerate this by emphasizing the most critical part of the word, allowing your brain to complete the pattern recognition instantly.

Sit back, relax, and let the words flow. Adjust the speed with the rate options, or press Ctrl-C to stop. Happy reading!"""
